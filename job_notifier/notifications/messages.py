"""Amharic message catalogue for job notifications."""

NEW_JOB_TITLE = "አዲስ የስራ እድል ታገኘ!"

IN_APP_MESSAGE = (
    '{company_name} በ{city} ውስጥ "{job_title}" ስራ አውጥቷል። '
    "ይህ ስራ ከእርስዎ ምርጫዎች ጋር ይዛመዳል።"
)

NOT_SPECIFIED = "አልተገለጸም"

DEFAULT_GREETING_NAME = "የተከበርክ/ሽ ተጠቃሚ"

DEFAULT_RECIPIENT_NAME = "Job Seeker"

# Field labels shared by the Telegram and email templates
LABELS = {
    "title": "የስራ ርዕስ",
    "company": "ኩባንያ",
    "city": "ከተማ",
    "category": "ምድብ",
    "job_type": "የስራ አይነት",
    "experience_level": "የልምድ ደረጃ",
    "description": "መግለጫ",
}

MATCHES_PREFERENCES = "ይህ ስራ ከእርስዎ የማሳወቂያ ምርጫዎች ጋር ይዛመዳል።"

TELEGRAM_CALL_TO_ACTION = "ለበለጠ መረጃ መተግበሪያውን ይጎብኙ።"

EMAIL_INTRO = "ከእርስዎ የማሳወቂያ ምርጫዎች ጋር የሚዛመድ አዲስ የስራ እድል ታገኘ:"

EMAIL_BUTTON = "ሙሉ መረጃ ይመልከቱ"

EMAIL_FOOTER_REASON = "ይህ ኢሜይል የተላከልዎት በZehulu Jobs ላይ ባዘጋጁት የማሳወቂያ ምርጫ መሰረት ነው።"

EMAIL_FOOTER_SETTINGS = "የማሳወቂያ ምርጫዎችን ለመቀየር መተግበሪያውን ይጎብኙ።"


def in_app_message(company_name: str, city: str, job_title: str) -> str:
    return IN_APP_MESSAGE.format(company_name=company_name, city=city, job_title=job_title)
