from django.urls import path
from . import views

app_name = 'reflections'

urlpatterns = [
    path('answer', views.practice_answer, name='practice_answer'),
    path('reflection/<str:reflection_date>', views.reflection_detail, name='reflection_detail'),
    path('reflections', views.reflection_dates, name='reflection_dates'),
    path('stats', views.practice_stats, name='practice_stats'),
    path('weekly-summaries', views.weekly_summaries, name='weekly_summaries'),
]
