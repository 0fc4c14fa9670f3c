# medreminder/messages.py
"""
User-facing message catalog.

Keys are either identity-provider codes (``auth/...``) or application keys.
``MESSAGES_LOCALE`` picks the catalog; Turkish is the product's primary
language.
"""
from flask import current_app, has_app_context

DEFAULT_LOCALE = "en"

CATALOG = {
    "en": {
        # identity provider
        "auth/invalid-email": "Invalid email address.",
        "auth/user-disabled": "This user account has been disabled.",
        "auth/user-not-found": "No user is registered with this email address.",
        "auth/wrong-password": "Wrong password.",
        "auth/invalid-credential": "Email or password is incorrect.",
        "auth/too-many-requests": "Too many failed sign-in attempts. Please try again later.",
        "auth/email-already-in-use": "This email address is already in use.",
        "auth/weak-password": "Password is too weak. Please choose a stronger password.",
        "auth/operation-not-allowed": "This operation is currently disabled.",
        "auth/network-request-failed": "Network error. Please check your internet connection.",
        "auth/login-failed": "An error occurred while signing in.",
        "auth/signup-failed": "An error occurred while signing up.",
        # signup form
        "signup/name-required": "Please enter your name.",
        "signup/password-too-short": "Password must be at least 6 characters.",
        "signup/password-mismatch": "Passwords do not match.",
        "signup/email-required": "Please enter your email address.",
        "login/fields-required": "Email and password are required.",
        # medication form
        "medication/name-dosage-required": "Please enter the medication name and dosage.",
        "medication/time-required": "You must enter at least one time.",
        "medication/time-format": "Invalid time format. Please use HH:mm (e.g. 08:00).",
        "medication/date-format": "Invalid date. Please use YYYY-MM-DD.",
        "medication/date-range": "End date cannot be before the start date.",
        "medication/active-format": "Active status must be true or false.",
        "medication/not-found": "Medication not found.",
        "medication/save-failed": "An error occurred while saving the medication.",
        "medication/delete-failed": "An error occurred while deleting the medication.",
        "medication/toggle-failed": "An error occurred while updating the medication status.",
        "medication/load-failed": "An error occurred while loading medications.",
        "medication/saved": "Medication saved.",
        "medication/deleted": "Medication deleted.",
        "medication/updated": "Medication updated.",
        "medication/swept": "Orphaned dose records removed.",
        # doses and dashboard
        "dose/mark-failed": "An error occurred while marking the dose.",
        "dose/marked": "Dose marked as taken.",
        "dose/fields-required": "Medication and scheduled time are required.",
        "dashboard/no-upcoming": "No medication to take in the next 3 hours.",
        "dashboard/ok": "Dashboard loaded.",
        # session
        "session/login-ok": "Login successful.",
        "session/signup-ok": "Account created.",
        "session/logout-ok": "Signed out.",
        "session/logout-failed": "An error occurred while signing out.",
        "session/token-expired": "Token expired.",
        "session/token-revoked": "Token has been revoked.",
        "generic/error": "An unexpected error occurred.",
    },
    "tr": {
        "auth/invalid-email": "Geçersiz e-posta adresi.",
        "auth/user-disabled": "Bu kullanıcı hesabı devre dışı bırakılmış.",
        "auth/user-not-found": "Bu e-posta adresine kayıtlı kullanıcı bulunamadı.",
        "auth/wrong-password": "Şifre hatalı.",
        "auth/invalid-credential": "E-posta veya şifre hatalı.",
        "auth/too-many-requests": "Çok fazla başarısız giriş denemesi. Lütfen daha sonra tekrar deneyin.",
        "auth/email-already-in-use": "Bu e-posta adresi zaten kullanılıyor.",
        "auth/weak-password": "Şifre çok zayıf. Lütfen daha güçlü bir şifre seçin.",
        "auth/operation-not-allowed": "Bu işlem şu anda devre dışı.",
        "auth/network-request-failed": "Ağ hatası. Lütfen internet bağlantınızı kontrol edin.",
        "auth/login-failed": "Giriş yapılırken bir hata oluştu.",
        "auth/signup-failed": "Kayıt olurken bir hata oluştu.",
        "signup/name-required": "Lütfen adınızı girin.",
        "signup/password-too-short": "Şifre en az 6 karakter olmalıdır.",
        "signup/password-mismatch": "Şifreler eşleşmiyor.",
        "signup/email-required": "Lütfen e-posta adresinizi girin.",
        "login/fields-required": "E-posta ve şifre gereklidir.",
        "medication/name-dosage-required": "Lütfen ilaç adı ve doz bilgisini girin.",
        "medication/time-required": "En az bir saat girmelisiniz.",
        "medication/time-format": "Saat formatı geçersiz. Lütfen HH:mm formatında girin (örn: 08:00).",
        "medication/date-format": "Geçersiz tarih. Lütfen YYYY-MM-DD formatında girin.",
        "medication/date-range": "Bitiş tarihi başlangıç tarihinden önce olamaz.",
        "medication/active-format": "Aktiflik durumu true veya false olmalıdır.",
        "medication/not-found": "İlaç bulunamadı.",
        "medication/save-failed": "İlaç kaydedilirken bir hata oluştu.",
        "medication/delete-failed": "İlaç silinirken bir hata oluştu.",
        "medication/toggle-failed": "İlaç durumu güncellenirken bir hata oluştu.",
        "medication/load-failed": "İlaçlar yüklenirken bir hata oluştu.",
        "medication/saved": "İlaç kaydedildi.",
        "medication/deleted": "İlaç silindi.",
        "medication/updated": "İlaç güncellendi.",
        "medication/swept": "Sahipsiz doz kayıtları silindi.",
        "dose/mark-failed": "Doza işaretlenirken bir hata oluştu.",
        "dose/marked": "Doz alındı olarak işaretlendi.",
        "dose/fields-required": "İlaç ve saat bilgisi gereklidir.",
        "dashboard/no-upcoming": "Önümüzdeki 3 saat içinde alınması gereken ilaç yok.",
        "dashboard/ok": "Panel yüklendi.",
        "session/login-ok": "Giriş başarılı.",
        "session/signup-ok": "Hesap oluşturuldu.",
        "session/logout-ok": "Çıkış yapıldı.",
        "session/logout-failed": "Çıkış yapılırken bir hata oluştu.",
        "session/token-expired": "Oturum süresi doldu.",
        "session/token-revoked": "Oturum sonlandırılmış.",
        "generic/error": "Beklenmeyen bir hata oluştu.",
    },
}


def message(key, fallback=None, locale=None):
    if locale is None:
        locale = DEFAULT_LOCALE
        if has_app_context():
            locale = current_app.config.get("MESSAGES_LOCALE", DEFAULT_LOCALE)
    catalog = CATALOG.get(locale) or CATALOG[DEFAULT_LOCALE]
    if key in catalog:
        return catalog[key]
    return key if fallback is None else fallback


def auth_error_message(code, raw_message="", action="login"):
    """Localized text for a provider error code, else the provider's own text."""
    fallback_key = "auth/signup-failed" if action == "signup" else "auth/login-failed"
    if code:
        text = message(code, fallback="")
        if text:
            return text
    return raw_message or message(fallback_key)
