import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='DailyReflection',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('reflection_date', models.DateField()),
                ('step', models.CharField(choices=[('react', 'React'), ('respond', 'Respond'), ('notice', 'Notice'), ('learn', 'Learn'), ('review', 'Review')], default='react', max_length=16)),
                ('react', models.TextField(blank=True, default='')),
                ('respond', models.TextField(blank=True, default='')),
                ('notice', models.TextField(blank=True, default='')),
                ('learn', models.TextField(blank=True, default='')),
                ('daily_mirror', models.TextField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='daily_reflections', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-reflection_date'],
                'indexes': [models.Index(fields=['user', 'reflection_date'], name='daily_reflection_user_date_idx')],
                'unique_together': {('user', 'reflection_date')},
            },
        ),
        migrations.CreateModel(
            name='WeeklySummary',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('week_start', models.DateField()),
                ('week_end', models.DateField()),
                ('summary_text', models.TextField()),
                ('reflection_count', models.PositiveIntegerField()),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='weekly_summaries', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name_plural': 'Weekly summaries',
                'ordering': ['-week_start'],
                'indexes': [models.Index(fields=['user', 'week_start'], name='weekly_summary_user_week_idx')],
                'unique_together': {('user', 'week_start', 'week_end')},
            },
        ),
    ]
