from django.urls import path

from .views.roster import StudentListCreateView, StudentDetailView
from .views.dashboard import StudentDashboardView

app_name = "students"

urlpatterns = [
    # ROSTER
    path("", StudentListCreateView.as_view(), name="student-list"),
    path("<int:student_id>/", StudentDetailView.as_view(), name="student-detail"),

    # DASHBOARD
    path("<int:student_id>/dashboard/", StudentDashboardView.as_view(), name="student-dashboard"),
]
