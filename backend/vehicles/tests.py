from django.test import TestCase
from rest_framework.test import APIClient

from drivers.models import DriverProfile
from rides.tests import make_admin, make_driver
from services.assignment import assign_vehicle_to_new_driver, release_vehicle_from_driver

from vehicles.models import Vehicle


class VehicleModelTests(TestCase):
    def test_assigned_flag_follows_driver(self):
        driver = make_driver()
        vehicle = Vehicle.objects.create(model='VW Polo', plate_number='CA 100', capacity=4)
        self.assertEqual(vehicle.assigned, Vehicle.UNASSIGNED)

        vehicle.driver = driver
        vehicle.save(update_fields=['driver'])
        vehicle.refresh_from_db()
        self.assertEqual(vehicle.assigned, Vehicle.ASSIGNED)

        vehicle.driver = None
        vehicle.save()
        vehicle.refresh_from_db()
        self.assertEqual(vehicle.assigned, Vehicle.UNASSIGNED)


class VehicleAssignmentServiceTests(TestCase):
    def test_no_free_vehicle_leaves_driver_unassigned(self):
        driver = make_driver()

        self.assertIsNone(assign_vehicle_to_new_driver(driver))

    def test_release_clears_driver_and_flag(self):
        driver = make_driver()
        Vehicle.objects.create(model='VW Polo', plate_number='CA 100', capacity=4, driver=driver)

        self.assertEqual(release_vehicle_from_driver(driver), 1)
        self.assertEqual(release_vehicle_from_driver(driver), 0)
        self.assertFalse(Vehicle.objects.filter(assigned=Vehicle.ASSIGNED).exists())


class VehicleApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.client.force_authenticate(user=make_admin())

    def test_create_and_list(self):
        response = self.client.post(
            '/api/vehicles/', {'model': 'VW Polo', 'plate_number': 'CA 100', 'capacity': 4}, format='json'
        )

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['vehicle']['assigned'], Vehicle.UNASSIGNED)

        listing = self.client.get('/api/vehicles/')
        self.assertEqual([v['plate_number'] for v in listing.data], ['CA 100'])

    def test_duplicate_plate_is_a_conflict(self):
        Vehicle.objects.create(model='VW Polo', plate_number='CA 100', capacity=4)
        other = Vehicle.objects.create(model='Toyota Avanza', plate_number='CA 200', capacity=7)

        created = self.client.post(
            '/api/vehicles/', {'model': 'Kia Picanto', 'plate_number': 'CA 100', 'capacity': 4}, format='json'
        )
        updated = self.client.put(f'/api/vehicles/{other.id}/', {'plate_number': 'CA 100'}, format='json')

        self.assertEqual(created.status_code, 409)
        self.assertEqual(updated.status_code, 409)
        other.refresh_from_db()
        self.assertEqual(other.plate_number, 'CA 200')

    def test_capacity_must_be_positive(self):
        response = self.client.post(
            '/api/vehicles/', {'model': 'VW Polo', 'plate_number': 'CA 100', 'capacity': 0}, format='json'
        )

        self.assertEqual(response.status_code, 400)

    def test_assign_free_vehicle(self):
        driver = make_driver()
        vehicle = Vehicle.objects.create(model='VW Polo', plate_number='CA 100', capacity=4)

        response = self.client.post(f'/api/vehicles/{vehicle.id}/assign/', {'driver_id': driver.id}, format='json')

        self.assertEqual(response.status_code, 200)
        vehicle.refresh_from_db()
        self.assertEqual(vehicle.driver_id, driver.id)
        self.assertEqual(vehicle.assigned, Vehicle.ASSIGNED)

    def test_assigning_a_taken_vehicle_is_a_conflict(self):
        holder = make_driver()
        other = make_driver(email='other@unilift.co.za', license='DL-2002')
        vehicle = Vehicle.objects.create(model='VW Polo', plate_number='CA 100', capacity=4, driver=holder)

        response = self.client.post(f'/api/vehicles/{vehicle.id}/assign/', {'driver_id': other.id}, format='json')

        self.assertEqual(response.status_code, 409)
        vehicle.refresh_from_db()
        self.assertEqual(vehicle.driver_id, holder.id)

    def test_unassign_driver_vehicle(self):
        driver = make_driver()
        vehicle = Vehicle.objects.create(model='VW Polo', plate_number='CA 100', capacity=4, driver=driver)

        response = self.client.delete(f'/api/vehicles/driver/{driver.id}/')
        again = self.client.delete(f'/api/vehicles/driver/{driver.id}/')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(again.status_code, 404)
        vehicle.refresh_from_db()
        self.assertIsNone(vehicle.driver_id)
        self.assertEqual(vehicle.assigned, Vehicle.UNASSIGNED)

    def test_delete_missing_vehicle(self):
        response = self.client.delete('/api/vehicles/9999/')

        self.assertEqual(response.status_code, 404)


class DriverVehicleAccessTests(TestCase):
    def test_driver_sees_own_vehicle_only(self):
        driver = make_driver(status=DriverProfile.NOT_AVAILABLE)
        other = make_driver(email='other@unilift.co.za', license='DL-2002')
        Vehicle.objects.create(model='VW Polo', plate_number='CA 100', capacity=4, driver=driver)
        client = APIClient()
        client.force_authenticate(user=driver.user)

        own = client.get(f'/api/vehicles/driver/{driver.id}/')
        theirs = client.get(f'/api/vehicles/driver/{other.id}/')
        unassign = client.delete(f'/api/vehicles/driver/{driver.id}/')

        self.assertEqual(own.status_code, 200)
        self.assertEqual(own.data['vehicle']['plate_number'], 'CA 100')
        self.assertEqual(theirs.status_code, 403)
        self.assertEqual(unassign.status_code, 403)
