from django.urls import path
from .api import profile_preferences

app_name = 'accounts'

urlpatterns = [
    path('preferences/', profile_preferences, name='preferences'),
]
