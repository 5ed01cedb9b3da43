from datetime import datetime

from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework.test import APIClient

from drivers.models import DriverProfile
from rides.models import RideRequest
from rides.tests import make_admin, make_driver, make_request, make_student
from vehicles.models import Vehicle

from reports import services


@override_settings(UNILIFT_FARE_PER_RIDE=50)
class DriverReportTests(TestCase):
    def setUp(self):
        self.student = make_student()
        self.driver = make_driver(status=DriverProfile.NOT_AVAILABLE)

    def test_driver_stats_ignore_unset_ratings(self):
        make_request(self.student, self.driver, status=RideRequest.COMPLETED, rating=3)
        make_request(self.student, self.driver, status=RideRequest.COMPLETED, rating=5)
        make_request(self.student, self.driver, status=RideRequest.COMPLETED, rating=0)
        make_request(self.student, self.driver, status=RideRequest.CANCELLED)

        stats = services.get_driver_stats(self.driver.id)

        self.assertEqual(stats['total_rides'], 3)
        self.assertEqual(stats['rated_rides'], 2)
        self.assertEqual(stats['average_rating'], 4.0)
        self.assertEqual(stats['total_earnings'], 150)
        self.assertEqual(stats['completed_today'], 3)

    def test_no_ratings_means_no_average(self):
        self.assertIsNone(services.get_driver_stats(self.driver.id)['average_rating'])

    def test_monthly_rides(self):
        march = make_request(self.student, self.driver, status=RideRequest.COMPLETED, rating=4)
        RideRequest.objects.filter(id=march.id).update(
            created_at=timezone.make_aware(datetime(2025, 3, 15, 12, 0))
        )

        months = services.get_driver_monthly_rides(self.driver.id, 2025)

        self.assertEqual(len(months), 12)
        self.assertEqual(months[2], {'month': 3, 'rides': 1, 'earnings': 50, 'average_rating': 4.0})
        self.assertEqual(months[0]['rides'], 0)


class StudentReportTests(TestCase):
    def test_student_stats(self):
        student = make_student()
        driver = make_driver(status=DriverProfile.NOT_AVAILABLE)
        make_request(student, driver, status=RideRequest.COMPLETED, rating=2)
        make_request(student, driver, status=RideRequest.COMPLETED, rating=4)
        make_request(student, driver, status=RideRequest.PENDING)
        make_request(student, driver, status=RideRequest.CANCELLED)

        stats = services.get_student_stats(student.id)

        self.assertEqual(stats['total_rides'], 2)
        self.assertEqual(stats['active_requests'], 1)
        self.assertEqual(stats['cancelled_requests'], 1)
        self.assertEqual(stats['average_rating'], 3.0)


class AdminOverviewTests(TestCase):
    def test_overview_counts(self):
        student = make_student()
        busy = make_driver(status=DriverProfile.NOT_AVAILABLE)
        make_driver(email='free@unilift.co.za', license='DL-2002')
        Vehicle.objects.create(model='VW Polo', plate_number='CA 100', capacity=4, driver=busy)
        Vehicle.objects.create(model='Toyota Avanza', plate_number='CA 200', capacity=7)
        make_request(student, busy, status=RideRequest.PENDING)
        make_request(student, busy, status=RideRequest.IN_PROGRESS)
        make_request(student, busy, status=RideRequest.COMPLETED)

        overview = services.get_admin_overview()

        self.assertEqual(overview['total_students'], 1)
        self.assertEqual(overview['available_drivers'], 1)
        self.assertEqual(overview['total_vehicles'], 2)
        self.assertEqual(overview['assigned_vehicles'], 1)
        self.assertEqual(overview['pending_requests'], 1)
        self.assertEqual(overview['active_requests'], 1)
        self.assertEqual(overview['completed_today'], 1)
        self.assertEqual(overview['requests_by_status'][RideRequest.CANCELLED], 0)
        self.assertEqual(overview['rides_last_7_days'][-1]['rides'], 3)


class ReportAccessTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.driver = make_driver()
        self.student = make_student()

    def test_overview_is_admin_only(self):
        self.client.force_authenticate(user=self.driver.user)
        self.assertEqual(self.client.get('/api/reports/overview/').status_code, 403)

        self.client.force_authenticate(user=make_admin())
        self.assertEqual(self.client.get('/api/reports/overview/').status_code, 200)

    def test_driver_sees_only_own_report(self):
        other = make_driver(email='other@unilift.co.za', license='DL-2002')
        self.client.force_authenticate(user=self.driver.user)

        own = self.client.get(f'/api/reports/drivers/{self.driver.id}/')
        theirs = self.client.get(f'/api/reports/drivers/{other.id}/')
        monthly = self.client.get(f'/api/reports/drivers/{self.driver.id}/monthly/', {'year': 'soon'})

        self.assertEqual(own.status_code, 200)
        self.assertEqual(theirs.status_code, 403)
        self.assertEqual(monthly.status_code, 400)

    def test_student_report(self):
        self.client.force_authenticate(user=self.student.user)

        response = self.client.get(f'/api/reports/students/{self.student.id}/')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['total_rides'], 0)

    def test_unknown_driver_is_404_for_admin(self):
        self.client.force_authenticate(user=make_admin())

        response = self.client.get('/api/reports/drivers/9999/')

        self.assertEqual(response.status_code, 404)
