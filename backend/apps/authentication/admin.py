"""
Django admin configuration for authentication app.
"""

from django.contrib import admin
from django.db.models import Count

from .models import User, RefreshToken


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('name', 'email', 'conversation_count', 'created_at')
    search_fields = ('name', 'email')
    readonly_fields = ('id', 'created_at', 'updated_at', 'password_hash')
    ordering = ('name',)

    fieldsets = (
        (None, {'fields': ('id', 'name', 'email')}),
        ('Credentials', {'fields': ('password_hash',)}),
        ('Timestamps', {'fields': ('created_at', 'updated_at')}),
    )

    def get_queryset(self, request):
        return super().get_queryset(request).annotate(_conversation_count=Count('memberships'))

    @admin.display(ordering='_conversation_count', description='Conversations')
    def conversation_count(self, obj):
        return obj._conversation_count


@admin.register(RefreshToken)
class RefreshTokenAdmin(admin.ModelAdmin):
    list_display = ('user', 'expires_at', 'is_valid', 'revoked_at')
    list_select_related = ('user',)
    search_fields = ('user__email',)
    list_filter = ('revoked_at',)
    readonly_fields = ('id', 'user', 'token', 'expires_at', 'created_at')

    @admin.display(boolean=True, description='Valid')
    def is_valid(self, obj):
        return obj.is_valid
