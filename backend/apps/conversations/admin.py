"""
Django admin configuration for conversations app.
"""

from django.contrib import admin
from .models import Conversation, ConversationMember


class ConversationMemberInline(admin.TabularInline):
    model = ConversationMember
    extra = 0
    readonly_fields = ('created_at',)
    raw_id_fields = ('user',)


@admin.register(Conversation)
class ConversationAdmin(admin.ModelAdmin):
    list_display = ('id', 'type', 'name', 'member_count', 'created_at')
    list_filter = ('type', 'created_at')
    search_fields = ('name', 'pair_key')
    readonly_fields = ('id', 'type', 'pair_key', 'created_at', 'updated_at')
    ordering = ('-created_at',)
    inlines = [ConversationMemberInline]

    @admin.display(description='Members')
    def member_count(self, obj):
        return obj.memberships.count()
