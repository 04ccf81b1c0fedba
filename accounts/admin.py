from django.contrib import admin
from django.contrib.auth.admin import UserAdmin
from .models import User, CompanyProfile

# 1. منع تكرار التسجيل
if admin.site.is_registered(User):
    admin.site.unregister(User)


# 2. بروفايل الشركة داخل صفحة المستخدم
class CompanyProfileInline(admin.StackedInline):
    model = CompanyProfile
    can_delete = False
    verbose_name_plural = 'Company Profile Info'


# 3. تخصيص لوحة تحكم المستخدم
class CustomUserAdmin(UserAdmin):
    model = User
    list_display = ['username', 'email', 'name', 'role', 'is_staff', 'phone_number']
    list_filter = UserAdmin.list_filter + ('role',)
    search_fields = ('username', 'email', 'name')

    fieldsets = UserAdmin.fieldsets + (
        ('Role & Contact', {'fields': ('role', 'name', 'avatar', 'phone_number')}),
    )

    # بروفايل الشركة يظهر لحسابات الشركات فقط
    def get_inline_instances(self, request, obj=None):
        if not obj:
            return []
        if obj.role == User.ROLE_COMPANY:
            return [CompanyProfileInline(self.model, self.admin_site)]
        return []


@admin.register(CompanyProfile)
class CompanyProfileAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'location', 'rating', 'verified', 'cr_number', 'cr_verified_at')
    list_filter = ('verified',)
    search_fields = ('user__username', 'user__name', 'cr_number')
    list_editable = ('verified',)


admin.site.register(User, CustomUserAdmin)
