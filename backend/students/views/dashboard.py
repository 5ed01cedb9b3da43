from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from ..permissions import IsStudentOwnerOrAdmin
from students import services


class StudentDashboardView(APIView):
    """
    GET: active requests, rides awaiting a rating, stats and any
    "ride completed" notifications not shown yet.
    """
    permission_classes = [IsAuthenticated, IsStudentOwnerOrAdmin]

    def get(self, request, student_id):
        student = services.get_student(student_id)
        self.check_object_permissions(request, student)

        return Response(services.get_student_dashboard(student))
