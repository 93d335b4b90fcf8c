from django.urls import path

from pastes.views import IndexView, PasteDetailView

app_name = "pastes"

urlpatterns = [
    path("", IndexView.as_view(), name="index"),
    path("<str:name>", PasteDetailView.as_view(), name="paste-detail"),
]
