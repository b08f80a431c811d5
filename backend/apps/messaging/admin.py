"""
Django admin configuration for messaging app.
"""

from django.contrib import admin
from .models import Message


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    list_display = ('id', 'conversation', 'user', 'content_preview', 'attachment', 'created_at')
    list_filter = ('created_at', 'conversation__type')
    search_fields = ('content', 'attachment', 'user__email')
    readonly_fields = ('id', 'conversation', 'user', 'content', 'attachment', 'created_at')
    ordering = ('-created_at',)

    @admin.display(description='Content Preview')
    def content_preview(self, obj):
        content = obj.content or ''
        return content[:50] + '...' if len(content) > 50 else content
