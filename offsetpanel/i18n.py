"""Locales and UI message dictionaries.

Persian is the default locale. Only ``fa`` and ``en`` carry full message
dictionaries; the other locales fall back to Persian.
"""

from __future__ import annotations

DEFAULT_LOCALE = "fa"
LOCALES = ("fa", "en", "fr", "ar")
LANG_DIRECTION = {
    "fa": "rtl",
    "en": "ltr",
    "fr": "ltr",
    "ar": "rtl",
}

MESSAGES: dict[str, dict[str, str]] = {
    "fa": {
        "loading": "در حال بارگذاری...",
        "actions": "عملیات",
        "edit": "ویرایش",
        "cancel_edit": "لغو ویرایش",
        "refresh": "بارگذاری مجدد",
        "save_all": "ذخیره همه تغییرات",
        "save": "ذخیره",
        "add": "افزودن",
        "delete": "حذف",
        "empty_title": "هیچ داده‌ای یافت نشد",
        "empty_body": "برای همکار انتخاب شده قیمتی ثبت نشده است",
        "prices_title": "مدیریت قیمت‌ها",
        "prices_subtitle": "مدیریت قیمت‌های مختلف خدمات چاپ و تولید",
        "view_table": "مشاهده جدول قیمت",
        "not_found": "صفحه یافت نشد",
        "error.create": "خطا در ایجاد: {message}",
        "error.update": "خطا در به‌روزرسانی: {message}",
        "error.delete": "خطا در حذف: {message}",
        "error.bulk_save": "خطا در ذخیره: {message}",
        "error.validation": "خطا در اعتبارسنجی: {message}",
        "selector.cooperator": "انتخاب همکار",
        "selector.cooperator.all": "همه همکاران",
        "selector.cooperator.error": "خطا در بارگذاری لیست همکاران: {message}",
        "selector.range": "انتخاب محدوده تیراژ",
        "selector.range.all": "همه محدوده‌ها",
        "selector.range.error": "خطا در بارگذاری لیست محدوده تیراژ: {message}",
        "selector.box_type": "نوع جعبه",
        "selector.box_type.all": "همه انواع",
        "selector.box_type.error": "خطا در بارگذاری انواع جعبه: {message}",
        "selector.bindery_type": "نوع صحافی",
        "selector.bindery_type.all": "همه انواع",
        "selector.bindery_type.error": "خطا در بارگذاری انواع صحافی: {message}",
        "login.title": "ورود به پنل",
        "login.mobile": "شماره موبایل",
        "login.send": "ارسال کد",
        "login.otp": "کد تایید",
        "login.verify": "تایید",
        "login.sent_to": "کد ۶ رقمی به شماره {mobile} ارسال شد",
        "login.invalid_mobile": "شماره موبایل باید ۱۰ رقم باشد",
        "login.invalid_otp": "کد تایید باید ۶ رقم باشد",
        "login.dev_otp": "کد آزمایشی: {otp}",
        "login.expired": "کد منقضی شده است. دوباره درخواست کنید",
        "login.change_mobile": "تغییر شماره",
        "login.resend": "ارسال مجدد کد",
        "login.resend_wait": "ارسال مجدد تا {seconds} ثانیه دیگر",
        "login.new_user": "حساب جدید برای شما ساخته می‌شود",
        "logout": "خروج",
        "api.network": "خطای شبکه. لطفا اتصال اینترنت خود را بررسی کرده و دوباره تلاش کنید.",
        "api.authentication": "لطفا برای ادامه وارد شوید.",
        "api.authorization": "شما اجازه انجام این عملیات را ندارید.",
        "api.not_found": "منبع درخواستی یافت نشد.",
        "api.validation": "لطفا ورودی خود را بررسی کرده و دوباره تلاش کنید.",
        "api.rate_limit": "درخواست‌ها بیش از حد مجاز است. لطفا کمی صبر کنید.",
        "api.server": "خطای سرور. لطفا بعدا تلاش کنید.",
        "api.unknown": "خطای غیرمنتظره‌ای رخ داد. لطفا دوباره تلاش کنید.",
    },
    "en": {
        "loading": "Loading...",
        "actions": "Actions",
        "edit": "Edit",
        "cancel_edit": "Cancel editing",
        "refresh": "Refresh",
        "save_all": "Save all changes",
        "save": "Save",
        "add": "Add",
        "delete": "Delete",
        "empty_title": "No data found",
        "empty_body": "No prices are registered for the selected cooperator",
        "prices_title": "Price management",
        "prices_subtitle": "Manage print and production service prices",
        "view_table": "View price table",
        "not_found": "Page not found",
        "error.create": "Create failed: {message}",
        "error.update": "Update failed: {message}",
        "error.delete": "Delete failed: {message}",
        "error.bulk_save": "Save failed: {message}",
        "error.validation": "Validation failed: {message}",
        "selector.cooperator": "Select cooperator",
        "selector.cooperator.all": "All cooperators",
        "selector.cooperator.error": "Failed to load cooperators: {message}",
        "selector.range": "Select circulation range",
        "selector.range.all": "All ranges",
        "selector.range.error": "Failed to load circulation ranges: {message}",
        "selector.box_type": "Box type",
        "selector.box_type.all": "All types",
        "selector.box_type.error": "Failed to load box types: {message}",
        "selector.bindery_type": "Bindery type",
        "selector.bindery_type.all": "All types",
        "selector.bindery_type.error": "Failed to load bindery types: {message}",
        "login.title": "Sign in",
        "login.mobile": "Mobile number",
        "login.send": "Send code",
        "login.otp": "Verification code",
        "login.verify": "Verify",
        "login.sent_to": "We've sent a 6-digit code to {mobile}",
        "login.invalid_mobile": "Please enter a valid 10-digit mobile number",
        "login.invalid_otp": "Please enter a valid 6-digit OTP",
        "login.dev_otp": "Development OTP: {otp}",
        "login.expired": "The code has expired. Please request a new one",
        "login.change_mobile": "Change number",
        "login.resend": "Resend code",
        "login.resend_wait": "Resend in {seconds} seconds",
        "login.new_user": "A new account will be created for you",
        "logout": "Sign out",
        "api.network": "Network error. Please check your internet connection and try again.",
        "api.authentication": "Please log in to continue.",
        "api.authorization": "You do not have permission to perform this action.",
        "api.not_found": "The requested resource was not found.",
        "api.validation": "Please check your input and try again.",
        "api.rate_limit": "Too many requests. Please wait and try again.",
        "api.server": "Server error. Please try again later.",
        "api.unknown": "An unexpected error occurred. Please try again.",
    },
}


def normalize_locale(locale: str | None) -> str:
    if locale in LOCALES:
        return locale
    return DEFAULT_LOCALE


def direction(locale: str) -> str:
    return LANG_DIRECTION.get(locale, "rtl")


def translate(key: str, locale: str | None = None, **kwargs) -> str:
    """Look up a UI message, falling back to Persian, then to the key itself."""
    catalog = MESSAGES.get(normalize_locale(locale)) or MESSAGES[DEFAULT_LOCALE]
    template = catalog.get(key) or MESSAGES[DEFAULT_LOCALE].get(key, key)
    return template.format(**kwargs) if kwargs else template
