from datetime import timedelta

from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APIClient
from unittest.mock import patch

from accounts.models import User
from drivers.models import DriverProfile
from students.models import ResAddress, Student
from services.assignment import driver_assignment
from services.notifications import emit_status_notification
from services.ratings import submit_rating
from services.ride_management import (
    ALLOWED_TRANSITIONS,
    TERMINAL_STATUSES,
    cancel_ride_request,
    create_ride_request,
    transition_request_status,
)
from services.ride_management.exceptions import (
    IllegalTransitionError,
    InvalidRatingError,
    InvalidStatusError,
    NoDriversAvailableError,
    RequestTerminalError,
    StudentNotFoundError,
)
from .models import RideRequest


def make_student(email='student@uni.ac.za', number='20230001'):
    user = User.objects.create_user(
        username=email,
        email=email,
        password='pass1234',
        role=User.STUDENT,
        first_name='Thandi',
        last_name='Mokoena',
        phone_number='0821234567'
    )
    residence, _ = ResAddress.objects.get_or_create(
        name='Res A', street_name='Main Road', house_number='1'
    )
    return Student.objects.create(user=user, student_number=number, residence=residence)


def make_driver(email='driver@unilift.co.za', license='DL-1001', status=DriverProfile.AVAILABLE):
    user = User.objects.create_user(
        username=email,
        email=email,
        password='driver1234',
        role=User.DRIVER,
        first_name='Sipho',
        last_name='Dlamini',
        phone_number='0831234567'
    )
    return DriverProfile.objects.create(user=user, license=license, availability_status=status)


def make_admin():
    return User.objects.create_user(
        username='admin@unilift.co.za',
        email='admin@unilift.co.za',
        password='admin1234',
        role=User.ADMIN
    )


def make_request(student, driver, status=RideRequest.PENDING, **extra):
    return RideRequest.objects.create(
        student=student,
        driver=driver,
        pickup_location='Res A',
        destination='Campus',
        pickup_time=timezone.now() + timedelta(hours=1),
        status=status,
        **extra
    )


CREATE_BODY = {
    'pickup_location': 'Res A',
    'destination': 'Campus',
    'pickup_time': '2025-03-01T08:00:00',
}

EDIT_BODY = {
    'pickup_time': '2025-03-02T09:30:00',
    'pickup_location': 'Res B',
    'destination': 'Library',
    'notes': 'Two bags',
}


class TransitionTableTests(TestCase):
    def test_terminal_states_have_no_outgoing_edges(self):
        for status in TERMINAL_STATUSES:
            self.assertEqual(ALLOWED_TRANSITIONS[status], frozenset())

    def test_every_non_terminal_state_can_be_cancelled(self):
        for status in (RideRequest.PENDING, RideRequest.ASSIGNED, RideRequest.IN_PROGRESS):
            self.assertIn(RideRequest.CANCELLED, ALLOWED_TRANSITIONS[status])

    def test_transition_errors(self):
        student = make_student()
        driver = make_driver(status=DriverProfile.NOT_AVAILABLE)
        ride = make_request(student, driver)

        with self.assertRaises(IllegalTransitionError):
            transition_request_status(ride.id, RideRequest.COMPLETED)
        with self.assertRaises(InvalidStatusError):
            transition_request_status(ride.id, 'Teleported')

        ride.status = RideRequest.COMPLETED
        ride.save()
        with self.assertRaises(RequestTerminalError):
            transition_request_status(ride.id, RideRequest.CANCELLED)


class RideRequestCreateTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.student = make_student()
        self.client.force_authenticate(user=self.student.user)

    def test_single_available_driver_is_assigned(self):
        driver = make_driver()

        response = self.client.post('/api/requests/', CREATE_BODY, format='json')

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['driverId'], driver.id)

        ride = RideRequest.objects.get(id=response.data['requestId'])
        driver.refresh_from_db()

        self.assertEqual(ride.status, RideRequest.PENDING)
        self.assertEqual(ride.driver_id, driver.id)
        self.assertFalse(ride.notified)
        self.assertEqual(driver.availability_status, DriverProfile.NOT_AVAILABLE)

    def test_no_available_driver_persists_nothing(self):
        make_driver(status=DriverProfile.NOT_AVAILABLE)

        response = self.client.post('/api/requests/', CREATE_BODY, format='json')

        self.assertEqual(response.status_code, 503)
        self.assertIn('error', response.data)
        self.assertEqual(RideRequest.objects.count(), 0)

        with self.assertRaises(NoDriversAvailableError):
            create_ride_request(self.student.id, 'Res A', timezone.now(), 'Campus')
        self.assertEqual(RideRequest.objects.count(), 0)

    def test_second_create_cannot_reuse_the_only_driver(self):
        make_driver()

        first = self.client.post('/api/requests/', CREATE_BODY, format='json')
        second = self.client.post('/api/requests/', CREATE_BODY, format='json')

        self.assertEqual(first.status_code, 201)
        self.assertEqual(second.status_code, 503)
        self.assertEqual(RideRequest.objects.count(), 1)

    def test_driver_claimed_concurrently_is_not_double_assigned(self):
        driver = make_driver()
        real_lookup = driver_assignment._next_available_driver

        def other_request_wins(exclude_ids):
            candidate = real_lookup(exclude_ids)
            if candidate is not None and not exclude_ids:
                # Another create flips the driver between selection and claim
                DriverProfile.objects.filter(id=candidate.id).update(
                    availability_status=DriverProfile.NOT_AVAILABLE
                )
            return candidate

        with patch(
            'services.assignment.driver_assignment._next_available_driver',
            side_effect=other_request_wins
        ):
            response = self.client.post('/api/requests/', CREATE_BODY, format='json')

        self.assertEqual(response.status_code, 503)
        self.assertEqual(RideRequest.objects.count(), 0)
        driver.refresh_from_db()
        self.assertEqual(driver.availability_status, DriverProfile.NOT_AVAILABLE)

    def test_lost_race_moves_on_to_next_driver(self):
        first = make_driver()
        second = make_driver(email='second@unilift.co.za', license='DL-1002')
        real_lookup = driver_assignment._next_available_driver

        def other_request_wins(exclude_ids):
            candidate = real_lookup(exclude_ids)
            if candidate is not None and candidate.id == first.id:
                DriverProfile.objects.filter(id=first.id).update(
                    availability_status=DriverProfile.NOT_AVAILABLE
                )
            return candidate

        with patch(
            'services.assignment.driver_assignment._next_available_driver',
            side_effect=other_request_wins
        ):
            result = create_ride_request(self.student.id, 'Res A', timezone.now(), 'Campus')

        self.assertEqual(result.ride.driver_id, second.id)
        self.assertEqual(RideRequest.objects.filter(driver=first).count(), 0)

    def test_lowest_id_available_driver_wins(self):
        first = make_driver()
        make_driver(email='second@unilift.co.za', license='DL-1002')

        response = self.client.post('/api/requests/', CREATE_BODY, format='json')

        self.assertEqual(response.data['driverId'], first.id)

    def test_missing_fields_rejected(self):
        make_driver()

        response = self.client.post('/api/requests/', {'pickup_location': 'Res A'}, format='json')

        self.assertEqual(response.status_code, 400)
        self.assertEqual(RideRequest.objects.count(), 0)

    def test_student_cannot_book_for_someone_else(self):
        make_driver()
        other = make_student(email='other@uni.ac.za', number='20230002')

        body = dict(CREATE_BODY, student_id=other.id)
        response = self.client.post('/api/requests/', body, format='json')

        self.assertEqual(response.status_code, 403)
        self.assertEqual(RideRequest.objects.count(), 0)

    def test_driver_cannot_create_requests(self):
        driver = make_driver()
        self.client.force_authenticate(user=driver.user)

        response = self.client.post('/api/requests/', CREATE_BODY, format='json')

        self.assertEqual(response.status_code, 403)

    def test_admin_books_for_a_student(self):
        make_driver()
        self.client.force_authenticate(user=make_admin())

        body = dict(CREATE_BODY, student_id=self.student.id)
        response = self.client.post('/api/requests/', body, format='json')

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['request']['student_id'], self.student.id)

    def test_unknown_student_is_404(self):
        make_driver()
        with self.assertRaises(StudentNotFoundError):
            create_ride_request(9999, 'Res A', timezone.now(), 'Campus')
        # No driver is claimed for an unknown student
        self.assertEqual(DriverProfile.objects.filter(availability_status=DriverProfile.AVAILABLE).count(), 1)


class RideStatusTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.student = make_student()
        self.driver = make_driver(status=DriverProfile.NOT_AVAILABLE)
        self.ride = make_request(self.student, self.driver)
        self.client.force_authenticate(user=self.driver.user)

    def patch_status(self, status):
        return self.client.patch(f'/api/requests/{self.ride.id}/', {'status': status}, format='json')

    def test_driver_walks_ride_to_completion(self):
        for status in (RideRequest.ASSIGNED, RideRequest.IN_PROGRESS, RideRequest.COMPLETED):
            response = self.patch_status(status)
            self.assertEqual(response.status_code, 200)
            self.assertEqual(response.data['request']['status'], status)

        self.driver.refresh_from_db()
        # Completion leaves the driver off the pool until they toggle back
        self.assertEqual(self.driver.availability_status, DriverProfile.NOT_AVAILABLE)

    def test_put_status_variant(self):
        response = self.client.put(
            f'/api/requests/{self.ride.id}/', {'status': RideRequest.ASSIGNED}, format='json'
        )

        self.assertEqual(response.status_code, 200)
        self.ride.refresh_from_db()
        self.assertEqual(self.ride.status, RideRequest.ASSIGNED)

    def test_skipping_a_state_is_a_conflict(self):
        response = self.patch_status(RideRequest.COMPLETED)

        self.assertEqual(response.status_code, 409)
        self.ride.refresh_from_db()
        self.assertEqual(self.ride.status, RideRequest.PENDING)

    def test_unknown_status_is_rejected(self):
        response = self.patch_status('Done')

        self.assertEqual(response.status_code, 400)

    def test_missing_request_is_404(self):
        response = self.client.patch('/api/requests/9999/', {'status': RideRequest.ASSIGNED}, format='json')

        self.assertEqual(response.status_code, 404)

    def test_other_driver_cannot_touch_the_ride(self):
        other = make_driver(email='other@unilift.co.za', license='DL-2002')
        self.client.force_authenticate(user=other.user)

        response = self.patch_status(RideRequest.ASSIGNED)

        self.assertEqual(response.status_code, 403)
        self.ride.refresh_from_db()
        self.assertEqual(self.ride.status, RideRequest.PENDING)

    def test_cancel_through_status_releases_driver(self):
        self.ride.status = RideRequest.IN_PROGRESS
        self.ride.save()

        response = self.patch_status(RideRequest.CANCELLED)

        self.assertEqual(response.status_code, 200)
        self.driver.refresh_from_db()
        self.assertEqual(self.driver.availability_status, DriverProfile.AVAILABLE)

    def test_terminal_requests_never_change(self):
        self.client.force_authenticate(user=make_admin())

        for terminal in (RideRequest.COMPLETED, RideRequest.CANCELLED):
            RideRequest.objects.filter(id=self.ride.id).update(status=terminal)
            url = f'/api/requests/{self.ride.id}/'

            attempts = [
                self.client.patch(url, {'status': RideRequest.ASSIGNED}, format='json'),
                self.client.put(url, {'status': RideRequest.IN_PROGRESS}, format='json'),
                self.client.put(url, EDIT_BODY, format='json'),
                self.client.delete(url),
            ]

            for response in attempts:
                self.assertIn(response.status_code, (403, 409))
            self.ride.refresh_from_db()
            self.assertEqual(self.ride.status, terminal)


class RideCancelTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.student = make_student()
        self.driver = make_driver(status=DriverProfile.NOT_AVAILABLE)
        self.client.force_authenticate(user=self.student.user)

    def test_cancel_pending_or_assigned_releases_driver(self):
        for status in (RideRequest.PENDING, RideRequest.ASSIGNED):
            DriverProfile.objects.filter(id=self.driver.id).update(
                availability_status=DriverProfile.NOT_AVAILABLE
            )
            ride = make_request(self.student, self.driver, status=status)

            response = self.client.delete(f'/api/requests/{ride.id}/')

            self.assertEqual(response.status_code, 200)
            self.assertEqual(response.data['request']['status'], RideRequest.CANCELLED)
            self.driver.refresh_from_db()
            self.assertEqual(self.driver.availability_status, DriverProfile.AVAILABLE)

    def test_cancel_terminal_request_is_forbidden(self):
        ride = make_request(self.student, self.driver, status=RideRequest.COMPLETED, rating=4)

        response = self.client.delete(f'/api/requests/{ride.id}/')

        self.assertEqual(response.status_code, 403)
        ride.refresh_from_db()
        self.driver.refresh_from_db()
        self.assertEqual(ride.status, RideRequest.COMPLETED)
        self.assertEqual(self.driver.availability_status, DriverProfile.NOT_AVAILABLE)

    def test_cancel_missing_request_is_404(self):
        response = self.client.delete('/api/requests/9999/')

        self.assertEqual(response.status_code, 404)

    def test_cancel_reports_unseen_status_once(self):
        ride = make_request(self.student, self.driver)

        result = cancel_ride_request(ride.id)

        self.assertEqual(result.notification, 'Notification: Request is Pending')
        self.assertTrue(result.extra['was_assigned'])
        ride.refresh_from_db()
        self.assertTrue(ride.notified)

    def test_student_cannot_cancel_someone_elses_ride(self):
        other = make_student(email='other@uni.ac.za', number='20230002')
        ride = make_request(other, self.driver)

        response = self.client.delete(f'/api/requests/{ride.id}/')

        self.assertEqual(response.status_code, 403)


class RideEditTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.student = make_student()
        self.driver = make_driver(status=DriverProfile.NOT_AVAILABLE)
        self.client.force_authenticate(user=self.student.user)

    def test_edit_allowed_before_ride_starts(self):
        for status in (RideRequest.PENDING, RideRequest.ASSIGNED):
            ride = make_request(self.student, self.driver, status=status)

            response = self.client.put(f'/api/requests/{ride.id}/', EDIT_BODY, format='json')

            self.assertEqual(response.status_code, 200)
            ride.refresh_from_db()
            self.assertEqual(ride.status, status)
            self.assertEqual(ride.pickup_location, 'Res B')
            self.assertEqual(ride.destination, 'Library')
            self.assertEqual(ride.notes, 'Two bags')

    def test_edit_rejected_once_ride_started(self):
        for status in (RideRequest.IN_PROGRESS, RideRequest.COMPLETED, RideRequest.CANCELLED):
            ride = make_request(self.student, self.driver, status=status)

            response = self.client.put(f'/api/requests/{ride.id}/', EDIT_BODY, format='json')

            self.assertEqual(response.status_code, 403)
            ride.refresh_from_db()
            self.assertEqual(ride.status, status)
            self.assertEqual(ride.pickup_location, 'Res A')
            self.assertFalse(ride.notified)

    def test_edit_notification_is_one_shot(self):
        ride = make_request(self.student, self.driver)
        url = f'/api/requests/{ride.id}/'

        first = self.client.put(url, EDIT_BODY, format='json')
        second = self.client.put(url, EDIT_BODY, format='json')

        self.assertEqual(first.data['notification'], 'Notification: Request is Pending')
        self.assertIsNone(second.data['notification'])

    def test_edit_requires_all_trip_fields(self):
        ride = make_request(self.student, self.driver)

        response = self.client.put(
            f'/api/requests/{ride.id}/', {'destination': 'Library'}, format='json'
        )

        self.assertEqual(response.status_code, 400)


class RideRatingTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.student = make_student()
        self.driver = make_driver(status=DriverProfile.NOT_AVAILABLE)
        self.client.force_authenticate(user=self.student.user)

    def rate(self, ride, value):
        return self.client.put(f'/api/requests/{ride.id}/rate/', {'rate': value}, format='json')

    def test_completed_ride_is_rated_once(self):
        ride = make_request(self.student, self.driver, status=RideRequest.COMPLETED)

        first = self.rate(ride, 5)
        second = self.rate(ride, 4)

        self.assertEqual(first.status_code, 200)
        self.assertEqual(second.status_code, 409)
        ride.refresh_from_db()
        self.assertEqual(ride.rating, 5)

    def test_pending_ride_cannot_be_rated(self):
        ride = make_request(self.student, self.driver)

        response = self.rate(ride, 3)

        self.assertEqual(response.status_code, 403)
        ride.refresh_from_db()
        self.assertIsNone(ride.rating)

    def test_out_of_range_and_non_integer_ratings_rejected(self):
        ride = make_request(self.student, self.driver, status=RideRequest.COMPLETED)

        for value in (0, 6, 4.5, '4', True, None):
            response = self.rate(ride, value)
            self.assertEqual(response.status_code, 400, msg=repr(value))

        ride.refresh_from_db()
        self.assertIsNone(ride.rating)

    def test_zero_rating_counts_as_unset(self):
        ride = make_request(self.student, self.driver, status=RideRequest.COMPLETED)
        RideRequest.objects.filter(id=ride.id).update(rating=0)

        response = self.rate(ride, 4)

        self.assertEqual(response.status_code, 200)
        ride.refresh_from_db()
        self.assertEqual(ride.rating, 4)

    def test_put_rate_variant(self):
        ride = make_request(self.student, self.driver, status=RideRequest.COMPLETED)

        response = self.client.put(f'/api/requests/{ride.id}/', {'rate': 3}, format='json')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['request']['rating'], 3)

    def test_put_with_status_and_rate_is_ambiguous(self):
        ride = make_request(self.student, self.driver, status=RideRequest.COMPLETED)

        response = self.client.put(
            f'/api/requests/{ride.id}/', {'rate': 3, 'status': RideRequest.COMPLETED}, format='json'
        )

        self.assertEqual(response.status_code, 400)

    def test_service_rejects_string_ratings(self):
        ride = make_request(self.student, self.driver, status=RideRequest.COMPLETED)

        with self.assertRaises(InvalidRatingError):
            submit_rating(ride.id, '4')


class NotifiedFlagTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.student = make_student()
        self.driver = make_driver(status=DriverProfile.NOT_AVAILABLE)

    def test_status_notification_only_for_open_unflagged_requests(self):
        ride = make_request(self.student, self.driver, status=RideRequest.ASSIGNED)

        self.assertEqual(emit_status_notification(ride), 'Notification: Request is Assigned')
        self.assertIsNone(emit_status_notification(ride))

        done = make_request(self.student, self.driver, status=RideRequest.COMPLETED)
        self.assertIsNone(emit_status_notification(done))
        done.refresh_from_db()
        self.assertFalse(done.notified)

    def test_stale_copy_does_not_notify_twice(self):
        ride = make_request(self.student, self.driver)
        stale = RideRequest.objects.get(id=ride.id)

        self.assertIsNotNone(emit_status_notification(ride))
        self.assertIsNone(emit_status_notification(stale))

    def test_mark_notified_only_for_completed(self):
        self.client.force_authenticate(user=self.student.user)
        pending = make_request(self.student, self.driver)
        done = make_request(self.student, self.driver, status=RideRequest.COMPLETED)

        rejected = self.client.put(f'/api/requests/{pending.id}/notified/')
        first = self.client.put(f'/api/requests/{done.id}/notified/')
        again = self.client.put(f'/api/requests/{done.id}/notified/')

        self.assertEqual(rejected.status_code, 400)
        self.assertEqual(first.status_code, 200)
        self.assertEqual(first.data['message'], 'Request marked as notified.')
        self.assertEqual(again.data['message'], 'Request was already notified.')
        done.refresh_from_db()
        self.assertTrue(done.notified)


class RideListTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.student = make_student()
        self.other = make_student(email='other@uni.ac.za', number='20230002')
        self.driver = make_driver(status=DriverProfile.NOT_AVAILABLE)
        self.mine = make_request(self.student, self.driver)
        self.theirs = make_request(self.other, self.driver, status=RideRequest.COMPLETED)

    def test_student_sees_only_own_requests(self):
        self.client.force_authenticate(user=self.student.user)

        response = self.client.get('/api/requests/')

        self.assertEqual([r['id'] for r in response.data], [self.mine.id])

    def test_driver_sees_open_queue(self):
        self.client.force_authenticate(user=self.driver.user)

        response = self.client.get('/api/requests/')

        self.assertEqual([r['id'] for r in response.data], [self.mine.id])

    def test_admin_filters_by_status(self):
        self.client.force_authenticate(user=make_admin())

        response = self.client.get('/api/requests/', {'status': RideRequest.COMPLETED})

        self.assertEqual([r['id'] for r in response.data], [self.theirs.id])

    def test_detail_hidden_from_other_students(self):
        self.client.force_authenticate(user=self.other.user)

        response = self.client.get(f'/api/requests/{self.mine.id}/')

        self.assertEqual(response.status_code, 403)


class CompletedTodayTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.student = make_student()
        self.driver = make_driver(status=DriverProfile.NOT_AVAILABLE)

    def test_driver_counts_own_completed_rides(self):
        make_request(self.student, self.driver, status=RideRequest.COMPLETED)
        make_request(self.student, self.driver, status=RideRequest.COMPLETED)
        make_request(self.student, self.driver, status=RideRequest.CANCELLED)
        self.client.force_authenticate(user=self.driver.user)

        response = self.client.get('/api/requests/completed/')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['completed_today'], 2)

    def test_driver_cannot_peek_at_other_drivers(self):
        other = make_driver(email='other@unilift.co.za', license='DL-2002')
        self.client.force_authenticate(user=self.driver.user)

        response = self.client.get('/api/requests/completed/', {'driver_id': other.id})

        self.assertEqual(response.status_code, 403)

    def test_admin_must_name_a_driver(self):
        self.client.force_authenticate(user=make_admin())

        response = self.client.get('/api/requests/completed/')

        self.assertEqual(response.status_code, 400)
