from django.test import TestCase
from rest_framework.test import APIClient

from accounts.models import User
from rides.models import RideRequest
from rides.tests import CREATE_BODY, make_admin, make_driver, make_request, make_student
from vehicles.models import Vehicle

from drivers.models import DriverProfile

NEW_DRIVER = {
    'name': 'Sipho',
    'surname': 'Dlamini',
    'email': 'sipho@unilift.co.za',
    'contact_details': '0839990000',
    'license': 'DL-55821',
    'availability_status': 'Available',
}


class DriverRosterTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.client.force_authenticate(user=make_admin())

    def test_admin_adds_driver_and_first_free_vehicle_is_assigned(self):
        taken = Vehicle.objects.create(model='VW Polo', plate_number='CA 100', capacity=4)
        first_free = Vehicle.objects.create(model='Toyota Quantum', plate_number='CA 101', capacity=14)
        Vehicle.objects.create(model='Toyota Avanza', plate_number='CA 102', capacity=7)
        taken.driver = make_driver()
        taken.save()

        response = self.client.post('/api/drivers/', NEW_DRIVER, format='json')

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['vehicle']['plate_number'], 'CA 101')

        driver = DriverProfile.objects.get(license='DL-55821')
        first_free.refresh_from_db()
        self.assertEqual(driver.availability_status, DriverProfile.AVAILABLE)
        self.assertEqual(first_free.driver_id, driver.id)
        self.assertEqual(first_free.assigned, Vehicle.ASSIGNED)

    def test_driver_without_free_vehicle_is_still_created(self):
        response = self.client.post('/api/drivers/', NEW_DRIVER, format='json')

        self.assertEqual(response.status_code, 201)
        self.assertIsNone(response.data['vehicle'])
        self.assertIsNone(response.data['driver']['vehicle'])

    def test_duplicate_license_is_a_conflict(self):
        make_driver(license='DL-55821')

        response = self.client.post('/api/drivers/', NEW_DRIVER, format='json')

        self.assertEqual(response.status_code, 409)
        self.assertEqual(DriverProfile.objects.count(), 1)

    def test_invalid_availability_rejected(self):
        body = dict(NEW_DRIVER, availability_status='Busy')

        response = self.client.post('/api/drivers/', body, format='json')

        self.assertEqual(response.status_code, 400)

    def test_delete_driver_frees_vehicle_and_removes_requests(self):
        driver = make_driver(status=DriverProfile.NOT_AVAILABLE)
        vehicle = Vehicle.objects.create(model='VW Polo', plate_number='CA 100', capacity=4, driver=driver)
        make_request(make_student(), driver, status=RideRequest.ASSIGNED)

        response = self.client.delete(f'/api/drivers/{driver.id}/')

        self.assertEqual(response.status_code, 200)
        vehicle.refresh_from_db()
        self.assertIsNone(vehicle.driver_id)
        self.assertEqual(vehicle.assigned, Vehicle.UNASSIGNED)
        self.assertEqual(RideRequest.objects.count(), 0)
        self.assertFalse(User.objects.filter(email='driver@unilift.co.za').exists())

    def test_update_driver(self):
        driver = make_driver()

        response = self.client.put(
            f'/api/drivers/{driver.id}/', {'license': 'DL-7777', 'surname': 'Zulu'}, format='json'
        )

        self.assertEqual(response.status_code, 200)
        driver.refresh_from_db()
        self.assertEqual(driver.license, 'DL-7777')
        self.assertEqual(driver.user.last_name, 'Zulu')


class DriverAvailabilityTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.driver = make_driver(status=DriverProfile.NOT_AVAILABLE)
        self.client.force_authenticate(user=self.driver.user)

    def url(self, driver_id=None):
        return f'/api/drivers/{driver_id or self.driver.id}/availability/'

    def test_driver_goes_on_shift(self):
        response = self.client.patch(self.url(), {'status': 'Available'}, format='json')

        self.assertEqual(response.status_code, 200)
        self.driver.refresh_from_db()
        self.assertEqual(self.driver.availability_status, DriverProfile.AVAILABLE)

    def test_invalid_status(self):
        response = self.client.patch(self.url(), {'status': 'Busy'}, format='json')

        self.assertEqual(response.status_code, 400)
        self.driver.refresh_from_db()
        self.assertEqual(self.driver.availability_status, DriverProfile.NOT_AVAILABLE)

    def test_cannot_toggle_another_driver(self):
        other = make_driver(email='other@unilift.co.za', license='DL-2002')

        response = self.client.patch(self.url(other.id), {'status': 'Not Available'}, format='json')

        self.assertEqual(response.status_code, 403)

    def test_missing_driver_is_404(self):
        self.client.force_authenticate(user=make_admin())

        response = self.client.patch(self.url(9999), {'status': 'Available'}, format='json')

        self.assertEqual(response.status_code, 404)

    def test_driver_with_open_request_cannot_rejoin_the_pool(self):
        student_client = APIClient()
        student_client.force_authenticate(user=make_student().user)
        self.client.patch(self.url(), {'status': 'Available'}, format='json')

        created = student_client.post('/api/requests/', CREATE_BODY, format='json')
        rejoin = self.client.patch(self.url(), {'status': 'Available'}, format='json')
        second = student_client.post('/api/requests/', CREATE_BODY, format='json')

        self.assertEqual(created.status_code, 201)
        self.assertEqual(rejoin.status_code, 409)
        self.assertIn('error', rejoin.data)
        self.assertEqual(second.status_code, 503)
        self.assertEqual(RideRequest.objects.filter(driver=self.driver).count(), 1)
        self.driver.refresh_from_db()
        self.assertEqual(self.driver.availability_status, DriverProfile.NOT_AVAILABLE)

    def test_driver_rejoins_after_completing_the_ride(self):
        make_request(make_student(), self.driver, status=RideRequest.COMPLETED)

        response = self.client.patch(self.url(), {'status': 'Available'}, format='json')

        self.assertEqual(response.status_code, 200)

    def test_admin_cannot_mark_busy_driver_available(self):
        make_request(make_student(), self.driver, status=RideRequest.IN_PROGRESS)
        self.client.force_authenticate(user=make_admin())

        response = self.client.put(
            f'/api/drivers/{self.driver.id}/', {'availability_status': 'Available'}, format='json'
        )

        self.assertEqual(response.status_code, 409)
        self.driver.refresh_from_db()
        self.assertEqual(self.driver.availability_status, DriverProfile.NOT_AVAILABLE)

    def test_busy_driver_can_still_go_off_shift(self):
        self.driver.availability_status = DriverProfile.AVAILABLE
        self.driver.save()
        make_request(make_student(), self.driver, status=RideRequest.ASSIGNED)

        response = self.client.patch(self.url(), {'status': 'Not Available'}, format='json')

        self.assertEqual(response.status_code, 200)

    def test_driver_cannot_go_on_shift_through_profile_update(self):
        self.client.put(
            f'/api/drivers/{self.driver.id}/', {'availability_status': 'Available'}, format='json'
        )

        self.driver.refresh_from_db()
        self.assertEqual(self.driver.availability_status, DriverProfile.NOT_AVAILABLE)


class DriverDashboardTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.driver = make_driver(status=DriverProfile.NOT_AVAILABLE)
        self.student = make_student()
        self.client.force_authenticate(user=self.driver.user)

    def dashboard(self):
        return self.client.get(f'/api/drivers/{self.driver.id}/dashboard/')

    def test_open_requests_listed_without_consuming_the_flag(self):
        pending = make_request(self.student, self.driver)
        started = make_request(self.student, self.driver, status=RideRequest.IN_PROGRESS)
        make_request(self.student, self.driver, status=RideRequest.COMPLETED, rating=4)

        first = self.dashboard()
        second = self.dashboard()

        self.assertEqual(first.status_code, 200)
        self.assertEqual(
            sorted(n['request_id'] for n in first.data['notifications']),
            sorted([pending.id, started.id])
        )
        self.assertEqual(second.data['notifications'], first.data['notifications'])
        self.assertEqual(len(second.data['active_requests']), 2)
        self.assertFalse(RideRequest.objects.filter(notified=True).exists())

    def test_flagged_requests_are_not_reported(self):
        make_request(self.student, self.driver, notified=True)

        response = self.dashboard()

        self.assertEqual(response.data['notifications'], [])
        self.assertEqual(len(response.data['active_requests']), 1)

    def test_dashboard_stats(self):
        make_request(self.student, self.driver, status=RideRequest.COMPLETED, rating=4)
        make_request(self.student, self.driver, status=RideRequest.COMPLETED, rating=5)

        stats = self.dashboard().data['stats']

        self.assertEqual(stats['total_rides'], 2)
        self.assertEqual(stats['average_rating'], 4.5)
        self.assertEqual(stats['total_earnings'], 100)

    def test_other_driver_forbidden(self):
        other = make_driver(email='other@unilift.co.za', license='DL-2002')
        self.client.force_authenticate(user=other.user)

        response = self.dashboard()

        self.assertEqual(response.status_code, 403)
