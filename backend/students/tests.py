from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from accounts.models import User
from drivers.models import DriverProfile
from rides.models import RideRequest
from rides.tests import CREATE_BODY, make_admin, make_driver, make_request, make_student

from .models import ResAddress, Student

NEW_STUDENT = {
    'name': 'Lerato',
    'surname': 'Khumalo',
    'email': 'lerato@uni.ac.za',
    'contact_details': '0721112222',
    'student_number': '20240042',
    'res_name': 'Res A',
    'street_name': 'Main Road',
    'house_number': '1',
}


@override_settings(UNILIFT_DEFAULT_PASSWORD='12345')
class StudentRosterTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.client.force_authenticate(user=make_admin())

    def test_admin_adds_student_with_default_password(self):
        response = self.client.post('/api/students/', NEW_STUDENT, format='json')

        self.assertEqual(response.status_code, 201)
        student = Student.objects.get(student_number='20240042')
        self.assertTrue(student.user.check_password('12345'))
        self.assertEqual(student.user.role, User.STUDENT)

    def test_students_at_same_address_share_residence(self):
        make_student()

        self.client.post('/api/students/', NEW_STUDENT, format='json')

        self.assertEqual(ResAddress.objects.count(), 1)

    def test_duplicate_student_number_is_a_conflict(self):
        make_student(number='20240042')

        response = self.client.post('/api/students/', NEW_STUDENT, format='json')

        self.assertEqual(response.status_code, 409)
        self.assertEqual(Student.objects.count(), 1)

    def test_partial_residence_update_rejected(self):
        student = make_student()

        response = self.client.put(
            f'/api/students/{student.id}/', {'res_name': 'Res B'}, format='json'
        )

        self.assertEqual(response.status_code, 400)

    def test_update_student_details(self):
        student = make_student()

        response = self.client.put(
            f'/api/students/{student.id}/',
            {'surname': 'Nkosi', 'res_name': 'Res B', 'street_name': 'Oak Ave', 'house_number': '7'},
            format='json'
        )

        self.assertEqual(response.status_code, 200)
        student.refresh_from_db()
        self.assertEqual(student.user.last_name, 'Nkosi')
        self.assertEqual(student.residence.name, 'Res B')

    def test_delete_student_releases_drivers_and_removes_requests(self):
        student = make_student()
        busy = make_driver(status=DriverProfile.NOT_AVAILABLE)
        make_request(student, busy, status=RideRequest.ASSIGNED)

        response = self.client.delete(f'/api/students/{student.id}/')

        self.assertEqual(response.status_code, 200)
        busy.refresh_from_db()
        self.assertEqual(busy.availability_status, DriverProfile.AVAILABLE)
        self.assertEqual(RideRequest.objects.count(), 0)
        self.assertFalse(User.objects.filter(email='student@uni.ac.za').exists())

    def test_missing_student_is_404(self):
        response = self.client.get('/api/students/9999/')

        self.assertEqual(response.status_code, 404)


class StudentAccessTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.student = make_student()
        self.other = make_student(email='other@uni.ac.za', number='20230002')
        self.client.force_authenticate(user=self.student.user)

    def test_student_cannot_list_roster(self):
        response = self.client.get('/api/students/')

        self.assertEqual(response.status_code, 403)

    def test_student_reads_only_own_profile(self):
        own = self.client.get(f'/api/students/{self.student.id}/')
        other = self.client.get(f'/api/students/{self.other.id}/')

        self.assertEqual(own.status_code, 200)
        self.assertEqual(own.data['student_number'], '20230001')
        self.assertEqual(other.status_code, 403)

    def test_student_cannot_delete_themselves(self):
        response = self.client.delete(f'/api/students/{self.student.id}/')

        self.assertEqual(response.status_code, 403)
        self.assertTrue(Student.objects.filter(id=self.student.id).exists())


class StudentDashboardTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.student = make_student()
        self.driver = make_driver(status=DriverProfile.NOT_AVAILABLE)
        self.client.force_authenticate(user=self.student.user)

    def dashboard(self):
        return self.client.get(f'/api/students/{self.student.id}/dashboard/')

    def test_completed_ride_announced_once(self):
        done = make_request(self.student, self.driver, status=RideRequest.COMPLETED)

        first = self.dashboard()
        second = self.dashboard()

        self.assertEqual(first.status_code, 200)
        self.assertEqual([n['request_id'] for n in first.data['notifications']], [done.id])
        self.assertTrue(first.data['notifications'][0]['can_rate'])
        self.assertEqual(second.data['notifications'], [])

        done.refresh_from_db()
        self.assertTrue(done.notified)

    def test_dashboard_lists_active_and_unrated(self):
        active = make_request(self.student, self.driver, status=RideRequest.ASSIGNED)
        unrated = make_request(self.student, self.driver, status=RideRequest.COMPLETED)
        make_request(self.student, self.driver, status=RideRequest.COMPLETED, rating=5)

        data = self.dashboard().data

        self.assertEqual([r['id'] for r in data['active_requests']], [active.id])
        self.assertEqual([r['id'] for r in data['awaiting_rating']], [unrated.id])
        self.assertEqual(data['stats']['total_rides'], 2)
        self.assertEqual(data['stats']['average_rating'], 5.0)

    def test_completion_announced_after_driver_watched_the_ride(self):
        self.driver.availability_status = DriverProfile.AVAILABLE
        self.driver.save()
        driver_client = APIClient()
        driver_client.force_authenticate(user=self.driver.user)

        created = self.client.post('/api/requests/', CREATE_BODY, format='json')
        ride_id = created.data['requestId']
        seen = driver_client.get(f'/api/drivers/{self.driver.id}/dashboard/')
        for status in (RideRequest.ASSIGNED, RideRequest.IN_PROGRESS, RideRequest.COMPLETED):
            moved = driver_client.patch(f'/api/requests/{ride_id}/', {'status': status}, format='json')
            self.assertEqual(moved.status_code, 200)

        response = self.dashboard()

        self.assertEqual([n['request_id'] for n in seen.data['notifications']], [ride_id])
        self.assertEqual([n['request_id'] for n in response.data['notifications']], [ride_id])

    def test_open_requests_do_not_consume_the_flag(self):
        pending = make_request(self.student, self.driver)

        self.dashboard()

        pending.refresh_from_db()
        self.assertFalse(pending.notified)

    def test_other_student_dashboard_forbidden(self):
        other = make_student(email='other@uni.ac.za', number='20230002')

        response = self.client.get(f'/api/students/{other.id}/dashboard/')

        self.assertEqual(response.status_code, 403)
