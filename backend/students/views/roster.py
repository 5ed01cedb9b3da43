from rest_framework import status
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from accounts.permissions import IsAdmin
from ..permissions import IsStudentOwnerOrAdmin
from ..serializers import StudentSerializer, StudentWriteSerializer
from students import services


class StudentListCreateView(APIView):
    """
    GET: all students with their residence.
    POST: admin adds a student (account gets the default password).
    """
    permission_classes = [IsAuthenticated, IsAdmin]

    def get(self, request):
        students = services.list_students()
        return Response(StudentSerializer(students, many=True).data)

    def post(self, request):
        serializer = StudentWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        student = services.create_student(**serializer.to_service_kwargs())

        return Response({
            "message": "Student added successfully",
            "student": StudentSerializer(student).data,
        }, status=status.HTTP_201_CREATED)


class StudentDetailView(APIView):
    """
    GET: student profile (owner or admin).
    PUT: partial update (owner or admin).
    DELETE: remove the student and their requests (admin only).
    """
    permission_classes = [IsAuthenticated, IsStudentOwnerOrAdmin]

    def get_object(self, request, student_id):
        student = services.get_student(student_id)
        self.check_object_permissions(request, student)
        return student

    def get(self, request, student_id):
        student = self.get_object(request, student_id)
        return Response(StudentSerializer(student).data)

    def put(self, request, student_id):
        student = self.get_object(request, student_id)

        serializer = StudentWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        student = services.update_student(student.id, **serializer.to_service_kwargs())

        return Response({
            "message": "Student updated successfully",
            "student": StudentSerializer(student).data,
        })

    def delete(self, request, student_id):
        if not request.user.is_admin_role:
            return Response({"error": "Only administrators can delete students"}, status=403)

        services.delete_student(student_id)
        return Response({"message": "Student deleted successfully"})
