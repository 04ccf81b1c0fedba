"""Contact-information filter for user messages.

Blocks phone numbers (including Arabic-Indic digits and numbers spelled out
as Arabic words), e-mail addresses, social media handles, external links and
phrases asking to move the conversation elsewhere. Numbers split across
several quick messages are caught through a short per-pair history kept in
Django's cache.
"""

import logging
import re
import time

from django.core.cache import cache

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 5
SEQUENTIAL_WINDOW_SECONDS = 60
HISTORY_TTL_SECONDS = 60 * 60
SUSPICIOUS_DIGIT_COUNT = 5
SUSPICIOUS_DIGIT_RATIO = 0.15

SEQUENTIAL_VIOLATION = 'نمط_متسلسل_مشبوه'

ARABIC_DIGITS = str.maketrans('٠١٢٣٤٥٦٧٨٩', '0123456789')

ARABIC_NUMBER_WORDS = {
    'صفر': '0', 'زيرو': '0',
    'واحد': '1',
    'اثنين': '2', 'اثنان': '2', 'إثنين': '2',
    'ثلاثة': '3', 'ثلاث': '3', 'ثلاثه': '3',
    'اربعة': '4', 'اربع': '4', 'أربعة': '4', 'أربع': '4',
    'خمسة': '5', 'خمس': '5', 'خمسه': '5',
    'ستة': '6', 'ست': '6', 'سته': '6',
    'سبعة': '7', 'سبع': '7', 'سبعه': '7',
    'ثمانية': '8', 'ثمان': '8', 'ثمانيه': '8',
    'تسعة': '9', 'تسع': '9', 'تسعه': '9',
}


def _compile(*patterns, flags=0):
    return [re.compile(p, flags) for p in patterns]


PHONE_PATTERNS = _compile(
    r'\b[0-9]{10}\b',
    r'\b[0-9]{3}[-.\s]?[0-9]{3}[-.\s]?[0-9]{4}\b',
    r'\([0-9]{3}\)[-.\s]?[0-9]{3}[-.\s]?[0-9]{4}\b',
    r'\+?\b[0-9]{1,3}[-.\s]?[0-9]{3}[-.\s]?[0-9]{3}[-.\s]?[0-9]{4}\b',
    r'\+?\b[0-9]{1,3}[-.\s]?[0-9]{9,10}\b',
    r'\b05[0-9]{8}\b',
    r'\b5[0-9]{8}\b',
    r'\+?[0-9]{4,15}\b',
    r'\b[0٠]?[5٥][0٠\s-]*[5٥6٦7٧8٨9٩][0٠\s-]*[0-9][\s0-9٠-٩-]{7,}\b',
    r'\b[0٠]?[5٥][\s-]*[0-9]{8}\b',
)

SAUDI_PHONE_PATTERNS = _compile(
    r'\b0?5[0-9]{8}\b',
    r'\b0?5[\s-]?[0-9]{4}[\s-]?[0-9]{4}\b',
    r'\+9665[0-9]{8}\b',
    r'\+966[\s-]?5[\s-]?[0-9]{8}\b',
    r'\b9665[0-9]{8}\b',
    r'\b966[\s-]?5[\s-]?[0-9]{8}\b',
)

PHONE_KEYWORD_RE = re.compile(
    r'\b(رقم|جوال|موبايل|هاتف|تلفون|اتصال|واتس|واتساب|whatsapp)[\s:]*[0-9٠-٩]+',
    re.IGNORECASE,
)

EMAIL_PATTERNS = [
    re.compile(r'\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b'),
    re.compile(r'\b[A-Za-z0-9._%+-]+\s*[\[(]at[\])]\s*[A-Za-z0-9.-]+\s*[\[(]dot[\])]\s*[A-Za-z]{2,}\b', re.IGNORECASE),
    re.compile(r'\b[A-Za-z0-9._%+-]+\s*\{\{at\}\}\s*[A-Za-z0-9.-]+\s*\{\{dot\}\}\s*[A-Za-z]{2,}\b', re.IGNORECASE),
]

SOCIAL_PATTERNS = _compile(
    r'\b(?:wa\.me|whatsapp\.com|t\.me|telegram\.me)/[a-zA-Z0-9_.]+',
    r'(?<!\S)@[a-zA-Z0-9_.]{1,30}\b',
    r'\b(?:instagram\.com|twitter\.com|x\.com|facebook\.com|fb\.com|snap\.chat|snapchat\.com)/[a-zA-Z0-9_.]+',
    r'\blinkedin\.com/in/[a-zA-Z0-9_-]{5,30}\b',
    r'\b(?:انستا|انستغرام|تويتر|تلغرام|تلجرام|فيسبوك|سناب|لينكد)[\s:]+[a-zA-Z0-9_.]{3,30}\b',
)

URL_RE = re.compile(
    r'\b(?:https?://|www\.)([a-zA-Z0-9][-a-zA-Z0-9@:%._+~#=]{1,256}\.[a-zA-Z0-9()]{1,6})\b',
)
ALLOWED_LINK_HOSTS = ('github.com', 'youtube.com')

CONTACT_KEYWORD_PATTERNS = [
    re.compile(
        r'\b(?:اتصل|اتصلوا|تواصل|تواصلوا)\s+(?:ب|مع)'
        r'|\b(?:اتصال|للتواصل|واتساب|واتس\s+اب|الواتس|جوال|رقم|موبايل|تلفون|هاتف|ارقام|ايميل|ايميلي'
        r'|بريدي|الالكتروني|الإلكتروني|انستغرام|انستقرام|سناب\s+شات|سناب|اضفني)\b'
    ),
    re.compile(
        r'\b(?:call\s+me|contact\s+me|reach\s+me|my\s+number|my\s+email|my\s+whatsapp|my\s+snap'
        r'|my\s+insta|my\s+handle)\b',
        re.IGNORECASE,
    ),
]

_WORD_JUNK_RE = re.compile(r'[^\u0600-\u06FF\u0750-\u077F\u08A0-\u08FF\w]')
_SEPARATORS_RE = re.compile(r'[.\-,،+/\\]')


# 1. تحويل الأرقام
def to_ascii_digits(text):
    return (text or '').translate(ARABIC_DIGITS)


def words_to_digits(text):
    """Return the digit runs (≥5 digits) hidden in ``text``, space separated.

    Arabic number words and digits glued to words ("رقم5") both count;
    any other word ends the current run.
    """
    words = _SEPARATORS_RE.sub(' ', to_ascii_digits(text)).split()
    runs = []
    current = ''

    for raw in words:
        word = _WORD_JUNK_RE.sub('', raw)
        digit = ARABIC_NUMBER_WORDS.get(word)
        if digit is not None:
            current += digit
        else:
            found = re.findall(r'[0-9]+', word)
            if found:
                current += ''.join(found)
            else:
                if len(current) >= 5:
                    runs.append(current)
                current = ''

        if len(current) >= 10:
            runs.append(current)
            current = ''

    if len(current) >= 5:
        runs.append(current)
    return ' '.join(runs)


# 2. أنماط الأرقام
def _any_match(patterns, text):
    return any(p.search(text) for p in patterns)


def detect_saudi_phone(text):
    if not text:
        return False
    return _any_match(SAUDI_PHONE_PATTERNS, to_ascii_digits(text))


def detect_suspicious_numbers(text):
    """A phone keyword followed by digits, or enough digits to dominate the text."""
    if not text:
        return False
    if PHONE_KEYWORD_RE.search(text):
        return True
    digit_count = len(re.findall(r'[0-9]', to_ascii_digits(text)))
    return digit_count >= SUSPICIOUS_DIGIT_COUNT and digit_count / len(text) > SUSPICIOUS_DIGIT_RATIO


def _has_external_link(text):
    for match in URL_RE.finditer(text):
        host = match.group(1).lower()
        if not any(host == allowed or host.endswith('.' + allowed) for allowed in ALLOWED_LINK_HOSTS):
            return True
    return False


# 3. سجل المحادثة بين كل مستخدمين
def _history_key(user_a, user_b):
    low, high = sorted((int(user_a), int(user_b)))
    return f'message-history:{low}:{high}'


def get_history(user_a, user_b):
    return cache.get(_history_key(user_a, user_b), [])


def add_to_history(from_user_id, to_user_id, content):
    """Remember a delivered message for sequential detection (last five per pair)."""
    key = _history_key(from_user_id, to_user_id)
    history = cache.get(key, [])
    history.append({'content': content, 'timestamp': time.time()})
    cache.set(key, history[-HISTORY_LIMIT:], HISTORY_TTL_SECONDS)


def detect_sequential_pattern(from_user_id, to_user_id, content):
    history = get_history(from_user_id, to_user_id)
    if not history:
        return False

    now = time.time()
    recent = [m['content'] for m in history if now - m['timestamp'] <= SEQUENTIAL_WINDOW_SECONDS]
    recent.append(content)
    if len(recent) < 2:
        return False

    combined = ' '.join(recent)
    spelled = words_to_digits(combined)

    if detect_saudi_phone(combined) or (spelled and detect_saudi_phone(spelled)):
        return True
    if detect_suspicious_numbers(combined) or (spelled and detect_suspicious_numbers(spelled)):
        return True

    groups = re.findall(r'[0-9]+', to_ascii_digits(combined))
    if len(groups) >= 2:
        joined = ''.join(groups)
        if 8 <= len(joined) <= 15:
            return True
    return False


# 4. الفحص الكامل
def check_message(text, from_user_id=None, to_user_id=None):
    """Return ``{'safe': bool, 'violations': [labels]}`` for a message body."""
    if not text or not isinstance(text, str):
        return {'safe': True, 'violations': []}

    violations = []
    ascii_text = to_ascii_digits(text)
    spelled = words_to_digits(text)

    # أرقام الهواتف
    if ascii_text != text and detect_saudi_phone(text):
        violations.append('رقم_هاتف_عربي')
    elif _any_match(PHONE_PATTERNS, text):
        violations.append('رقم_هاتف')
    elif ascii_text != text and _any_match(PHONE_PATTERNS, ascii_text):
        violations.append('رقم_هاتف_أرقام_عربية')
    elif spelled and detect_saudi_phone(spelled):
        violations.append('رقم_هاتف_مكتوب_نصياً')
    elif spelled and re.search(r'\b[0-9]{5,}\b', spelled):
        violations.append('رقم_محتمل_مكتوب_نصياً')

    if not violations and (
        detect_suspicious_numbers(text)
        or detect_suspicious_numbers(ascii_text)
        or (spelled and detect_suspicious_numbers(spelled))
    ):
        violations.append('نمط_مشبوه_محتمل_مشاركة_رقم')

    if _any_match(EMAIL_PATTERNS, text):
        violations.append('بريد_إلكتروني')
    if _any_match(SOCIAL_PATTERNS, text):
        violations.append('حساب_تواصل_اجتماعي')
    if _has_external_link(text):
        violations.append('رابط_خارجي')
    if _any_match(CONTACT_KEYWORD_PATTERNS, text):
        violations.append('محاولة_مشاركة_معلومات_اتصال')

    if from_user_id and to_user_id and detect_sequential_pattern(from_user_id, to_user_id, text):
        logger.warning('Sequential contact pattern between users %s and %s', from_user_id, to_user_id)
        violations.append(SEQUENTIAL_VIOLATION)

    return {'safe': not violations, 'violations': violations}


def sanitize_message(text, from_user_id=None, to_user_id=None):
    result = check_message(text, from_user_id, to_user_id)
    if result['safe']:
        return text
    return f"[تم حظر هذه الرسالة لأنها تحتوي على: {'، '.join(result['violations'])}]"
