# Generated migration for messaging app

from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('authentication', '0001_initial'),
        ('conversations', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Message',
            fields=[
                ('id', models.BigAutoField(primary_key=True, serialize=False)),
                ('content', models.TextField(blank=True, null=True)),
                ('attachment', models.CharField(blank=True, max_length=500, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('conversation', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='messages', to='conversations.conversation')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='messages', to='authentication.user')),
            ],
            options={
                'db_table': 'messages',
                'ordering': ['created_at', 'id'],
                'indexes': [
                    models.Index(fields=['conversation', 'created_at'], name='messages_conv_created_idx'),
                    models.Index(fields=['conversation', 'user'], name='messages_conv_user_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(
                        condition=models.Q(content__isnull=False) | models.Q(attachment__isnull=False),
                        name='messages_content_or_attachment',
                    ),
                ],
            },
        ),
    ]
