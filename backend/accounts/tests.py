from unittest.mock import Mock, patch

import requests
from django.db import DatabaseError, IntegrityError
from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from common.exceptions import api_exception_handler
from common.utils import format_phone_number, generate_random_password
from drivers.models import DriverProfile
from services.ride_management.exceptions import NoDriversAvailableError
from students.models import Student
from vehicles.models import Vehicle

from .models import User
from .tasks import send_password_reset_sms

STUDENT_BODY = {
    'name': 'Thandi',
    'surname': 'Mokoena',
    'email': 'thandi@uni.ac.za',
    'password': 'secret123',
    'role': 'student',
    'contact_details': '0821234567',
    'student_number': '20231234',
    'res_name': 'Kings Court',
    'street_name': 'Main Road',
    'house_number': '12',
}

DRIVER_BODY = {
    'name': 'Sipho',
    'surname': 'Dlamini',
    'email': 'sipho@unilift.co.za',
    'password': 'secret123',
    'role': 'driver',
    'contact_details': '0831234567',
    'license': 'DL-55821',
}


class RegisterTests(TestCase):
    def setUp(self):
        self.client = APIClient()

    def test_student_registration_creates_profile_and_tokens(self):
        response = self.client.post('/api/auth/register/', STUDENT_BODY, format='json')

        self.assertEqual(response.status_code, 201)
        self.assertIn('access', response.data['tokens'])

        student = Student.objects.get(student_number='20231234')
        self.assertEqual(student.user.role, User.STUDENT)
        self.assertEqual(student.residence.name, 'Kings Court')
        self.assertTrue(student.user.check_password('secret123'))
        self.assertEqual(response.data['user']['student_id'], student.id)

    def test_driver_registration_starts_off_shift_with_free_vehicle(self):
        Vehicle.objects.create(model='Toyota Quantum', plate_number='CA 100', capacity=14)
        first_free = Vehicle.objects.create(model='VW Polo', plate_number='CA 101', capacity=4)
        Vehicle.objects.filter(plate_number='CA 100').update(assigned=Vehicle.ASSIGNED)

        response = self.client.post('/api/auth/register/', DRIVER_BODY, format='json')

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['assigned_vehicle'], 'CA 101')

        driver = DriverProfile.objects.get(license='DL-55821')
        first_free.refresh_from_db()
        self.assertEqual(driver.availability_status, DriverProfile.NOT_AVAILABLE)
        self.assertEqual(first_free.driver_id, driver.id)
        self.assertEqual(first_free.assigned, Vehicle.ASSIGNED)

    def test_driver_registration_without_free_vehicle(self):
        response = self.client.post('/api/auth/register/', DRIVER_BODY, format='json')

        self.assertEqual(response.status_code, 201)
        self.assertIsNone(response.data['assigned_vehicle'])

    def test_student_needs_residence_fields(self):
        body = dict(STUDENT_BODY)
        del body['house_number']

        response = self.client.post('/api/auth/register/', body, format='json')

        self.assertEqual(response.status_code, 400)
        self.assertFalse(User.objects.exists())

    def test_driver_needs_license(self):
        body = dict(DRIVER_BODY)
        del body['license']

        response = self.client.post('/api/auth/register/', body, format='json')

        self.assertEqual(response.status_code, 400)

    def test_duplicate_email_is_a_conflict(self):
        self.client.post('/api/auth/register/', STUDENT_BODY, format='json')
        body = dict(STUDENT_BODY, student_number='20239999')

        response = self.client.post('/api/auth/register/', body, format='json')

        self.assertEqual(response.status_code, 409)
        self.assertEqual(Student.objects.count(), 1)

    def test_admin_role_cannot_be_self_assigned(self):
        body = dict(DRIVER_BODY, role='admin')

        response = self.client.post('/api/auth/register/', body, format='json')

        self.assertEqual(response.status_code, 400)


class LoginTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.client.post('/api/auth/register/', STUDENT_BODY, format='json')

    def test_login_with_email(self):
        response = self.client.post(
            '/api/auth/login/',
            {'email': 'thandi@uni.ac.za', 'password': 'secret123'},
            format='json'
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['user']['role'], User.STUDENT)
        self.assertIn('refresh', response.data['tokens'])

    def test_wrong_password(self):
        response = self.client.post(
            '/api/auth/login/',
            {'email': 'thandi@uni.ac.za', 'password': 'nope'},
            format='json'
        )

        self.assertEqual(response.status_code, 400)

    def test_refresh_token(self):
        login = self.client.post(
            '/api/auth/login/',
            {'email': 'thandi@uni.ac.za', 'password': 'secret123'},
            format='json'
        )

        ok = self.client.post('/api/auth/refresh/', {'refresh': login.data['tokens']['refresh']}, format='json')
        bad = self.client.post('/api/auth/refresh/', {'refresh': 'not-a-token'}, format='json')
        missing = self.client.post('/api/auth/refresh/', {}, format='json')

        self.assertEqual(ok.status_code, 200)
        self.assertIn('access', ok.data)
        self.assertEqual(bad.status_code, 401)
        self.assertEqual(missing.status_code, 400)

    def test_access_token_authenticates_requests(self):
        login = self.client.post(
            '/api/auth/login/',
            {'email': 'thandi@uni.ac.za', 'password': 'secret123'},
            format='json'
        )
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {login.data['tokens']['access']}")

        response = self.client.get('/api/auth/profile/')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['email'], 'thandi@uni.ac.za')

    def test_profile_requires_authentication(self):
        response = self.client.get('/api/auth/profile/')

        self.assertEqual(response.status_code, 401)


class ProfileTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(
            username='thandi@uni.ac.za',
            email='thandi@uni.ac.za',
            password='secret123',
            role=User.STUDENT
        )
        self.client.force_authenticate(user=self.user)

    def test_update_profile_and_password(self):
        response = self.client.put(
            '/api/auth/profile/',
            {'first_name': 'Thandeka', 'phone_number': '0820000000', 'password': 'newpass1'},
            format='json'
        )

        self.assertEqual(response.status_code, 200)
        self.user.refresh_from_db()
        self.assertEqual(self.user.first_name, 'Thandeka')
        self.assertEqual(self.user.phone_number, '0820000000')
        self.assertTrue(self.user.check_password('newpass1'))

    def test_role_is_read_only(self):
        self.client.put('/api/auth/profile/', {'role': User.ADMIN}, format='json')

        self.user.refresh_from_db()
        self.assertEqual(self.user.role, User.STUDENT)


class ForgotPasswordTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(
            username='sipho@unilift.co.za',
            email='sipho@unilift.co.za',
            password='secret123',
            role=User.DRIVER,
            phone_number='083 123 4567'
        )

    @patch('accounts.views.send_password_reset_sms')
    def test_known_email_gets_new_password_by_sms(self, mock_task):
        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.post(
                '/api/auth/forgot-password/', {'email': 'sipho@unilift.co.za'}, format='json'
            )

        self.assertEqual(response.status_code, 200)
        mock_task.delay.assert_called_once()

        phone_number, new_password = mock_task.delay.call_args[0]
        self.assertEqual(phone_number, '+27831234567')
        self.user.refresh_from_db()
        self.assertFalse(self.user.check_password('secret123'))
        self.assertTrue(self.user.check_password(new_password))

    @patch('accounts.views.send_password_reset_sms')
    def test_unknown_email_gets_same_answer(self, mock_task):
        known = self.client.post(
            '/api/auth/forgot-password/', {'email': 'sipho@unilift.co.za'}, format='json'
        )
        unknown = self.client.post(
            '/api/auth/forgot-password/', {'email': 'nobody@unilift.co.za'}, format='json'
        )

        self.assertEqual(unknown.status_code, 200)
        self.assertEqual(unknown.data, known.data)

    def test_missing_email(self):
        response = self.client.post('/api/auth/forgot-password/', {}, format='json')

        self.assertEqual(response.status_code, 400)


@override_settings(SMS_GATEWAY_URL='http://sms.test/send', SMS_TIMEOUT_SECONDS=1)
class PasswordResetSmsTaskTests(TestCase):
    @patch('accounts.tasks.requests.post')
    def test_sends_message_to_gateway(self, mock_post):
        mock_post.return_value = Mock(ok=True)

        self.assertTrue(send_password_reset_sms('+27831234567', 'Ab3dEf9h'))

        payload = mock_post.call_args.kwargs['json']
        self.assertEqual(payload['to'], '+27831234567')
        self.assertIn('Ab3dEf9h', payload['body'])

    @patch('accounts.tasks.requests.post')
    def test_gateway_failures_are_swallowed(self, mock_post):
        mock_post.return_value = Mock(ok=False, status_code=502, text='bad gateway')
        self.assertFalse(send_password_reset_sms('+27831234567', 'x'))

        mock_post.side_effect = requests.ConnectionError('down')
        self.assertFalse(send_password_reset_sms('+27831234567', 'x'))


class ContactUtilsTests(TestCase):
    def test_format_phone_number(self):
        self.assertEqual(format_phone_number('082 123 4567'), '+27821234567')
        self.assertEqual(format_phone_number('+27 82 123 4567'), '+27821234567')
        self.assertEqual(format_phone_number('821234567'), '+27821234567')

    def test_generate_random_password(self):
        password = generate_random_password()

        self.assertEqual(len(password), 8)
        self.assertTrue(password.isalnum())
        self.assertEqual(len(generate_random_password(12)), 12)


class ExceptionHandlerTests(TestCase):
    def test_domain_error_carries_its_status(self):
        response = api_exception_handler(NoDriversAvailableError(), {})

        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.data, {'error': 'No drivers are currently available.'})

    def test_duplicate_key_is_a_conflict(self):
        response = api_exception_handler(IntegrityError('UNIQUE constraint failed: vehicle.plate_number'), {})

        self.assertEqual(response.status_code, 409)
        self.assertNotIn('plate_number', response.data['error'])

    def test_database_error_is_generic(self):
        with self.assertLogs('common.exceptions', level='ERROR'):
            response = api_exception_handler(DatabaseError('connection refused on 10.0.0.5'), {})

        self.assertEqual(response.status_code, 500)
        self.assertNotIn('10.0.0.5', response.data['error'])
