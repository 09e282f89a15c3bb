"""Constants for Subscription Scanner."""

from decimal import Decimal
from pathlib import Path
from types import MappingProxyType

from subscription_scanner.models import ServiceMatch

# --- Config paths ---
CONFIG_DIR = Path.home() / ".subscription-scanner"
CREDENTIALS_PATH = CONFIG_DIR / "credentials.json"
DB_PATH = CONFIG_DIR / "subscriptions.db"
DEFAULT_USER_ID = "local"

# --- Gmail API ---
SCOPES = ["https://www.googleapis.com/auth/gmail.readonly"]
SEARCH_PAGE_SIZE = 50  # messages per search query
RETRY_ATTEMPTS = 5
RETRY_MAX_WAIT = 60  # seconds

# Ordered for recall: subject keywords first, then sender patterns, then phrases.
SEARCH_QUERIES = [
    "subject:(subscription OR receipt OR payment OR invoice OR billing OR renewal OR charged)",
    "from:(noreply OR no-reply OR billing OR payments OR receipt OR invoice)",
    "subject:(monthly OR annual OR yearly)",
    '"your subscription" OR "payment received" OR "receipt for" OR "invoice for"',
    '"auto-renewal" OR "renewed" OR "next billing"',
]

# --- Price extraction ---
MIN_PLAUSIBLE_PRICE = Decimal("0.99")
MAX_PLAUSIBLE_PRICE = Decimal("9999")
CURRENCY_CODES = ["USD", "INR", "EUR", "GBP", "CAD", "AUD"]
CURRENCY_SYMBOLS = "$₹€£"  # $ ₹ € £
PRICE_LABELS = ["Total", "Amount", "Charged", "Price", "Cost"]

# --- Currency detection (priority order) ---
DEFAULT_CURRENCY = "USD"
CURRENCY_MARKERS = [
    ("INR", ["₹", "INR", "Rs."]),
    ("EUR", ["€", "EUR"]),
    ("GBP", ["£", "GBP"]),
    ("CAD", ["CAD", "C$"]),
    ("AUD", ["AUD", "A$"]),
]

# --- Billing cycle keywords (priority order, matched lower-cased) ---
YEARLY_KEYWORDS = ["annual", "yearly", "per year", "/year", "every year"]
QUARTERLY_KEYWORDS = ["quarterly", "every 3 months", "every three months"]
WEEKLY_KEYWORDS = ["weekly", "per week", "/week"]

# --- Subject fallback for unknown services ---
SERVICE_NAME_MIN_LENGTH = 3
SERVICE_NAME_MAX_LENGTH = 49

# --- Categories seeded for every user ---
DEFAULT_CATEGORIES = [
    "Streaming",
    "Music",
    "Software",
    "Gaming",
    "News",
    "Cloud Storage",
    "Productivity",
    "Education",
    "Fitness",
    "Other",
]


def _service(name: str, category: str | None = None) -> ServiceMatch:
    return ServiceMatch(name=name, category=category)


# --- Known billing senders ---
# Sub-domains are listed before their parent domain so the more specific
# service wins (first match wins).  Message bodies are only searched for
# the registrable domains.
KNOWN_SERVICES = MappingProxyType(
    {
        "netflix.com": _service("Netflix", "Streaming"),
        "spotify.com": _service("Spotify", "Music"),
        "apple.com": _service("Apple", "Software"),
        "cloud.google.com": _service("Google Cloud", "Software"),
        "firebase.google.com": _service("Firebase", "Software"),
        "google.com": _service("Google One", "Cloud Storage"),
        "aws.amazon.com": _service("AWS", "Software"),
        "primevideo.com": _service("Amazon Prime Video", "Streaming"),
        "amazon.com": _service("Amazon Prime", "Streaming"),
        "hulu.com": _service("Hulu", "Streaming"),
        "disneyplus.com": _service("Disney+", "Streaming"),
        "hbomax.com": _service("HBO Max", "Streaming"),
        "max.com": _service("Max", "Streaming"),
        "youtube.com": _service("YouTube Premium", "Streaming"),
        "notion.so": _service("Notion", "Productivity"),
        "notion.com": _service("Notion", "Productivity"),
        "figma.com": _service("Figma", "Software"),
        "github.com": _service("GitHub", "Software"),
        "slack.com": _service("Slack", "Productivity"),
        "zoom.us": _service("Zoom", "Software"),
        "dropbox.com": _service("Dropbox", "Cloud Storage"),
        "adobe.com": _service("Adobe Creative Cloud", "Software"),
        "azure.microsoft.com": _service("Azure", "Software"),
        "microsoft.com": _service("Microsoft 365", "Software"),
        "office.com": _service("Microsoft 365", "Software"),
        "openai.com": _service("ChatGPT Plus", "Software"),
        "anthropic.com": _service("Claude Pro", "Software"),
        "canva.com": _service("Canva Pro", "Software"),
        "grammarly.com": _service("Grammarly", "Software"),
        "linkedin.com": _service("LinkedIn Premium", "Software"),
        "medium.com": _service("Medium", "News"),
        "patreon.com": _service("Patreon", "Other"),
        "twitch.tv": _service("Twitch", "Streaming"),
        "playstation.com": _service("PlayStation Plus", "Gaming"),
        "xbox.com": _service("Xbox Game Pass", "Gaming"),
        "nintendo.com": _service("Nintendo Switch Online", "Gaming"),
        "audible.com": _service("Audible", "Other"),
        "scribd.com": _service("Scribd", "Other"),
        "masterclass.com": _service("MasterClass", "Education"),
        "skillshare.com": _service("Skillshare", "Education"),
        "coursera.org": _service("Coursera", "Education"),
        "udemy.com": _service("Udemy", "Education"),
        "nordvpn.com": _service("NordVPN", "Software"),
        "expressvpn.com": _service("ExpressVPN", "Software"),
        "1password.com": _service("1Password", "Software"),
        "lastpass.com": _service("LastPass", "Software"),
        "bitwarden.com": _service("Bitwarden", "Software"),
        "evernote.com": _service("Evernote", "Productivity"),
        "todoist.com": _service("Todoist", "Productivity"),
        "asana.com": _service("Asana", "Productivity"),
        "trello.com": _service("Trello", "Productivity"),
        "monday.com": _service("Monday.com", "Productivity"),
        "calendly.com": _service("Calendly", "Productivity"),
        "mailchimp.com": _service("Mailchimp", "Software"),
        "hubspot.com": _service("HubSpot", "Software"),
        "salesforce.com": _service("Salesforce", "Software"),
        "zendesk.com": _service("Zendesk", "Software"),
        "intercom.com": _service("Intercom", "Software"),
        "vercel.com": _service("Vercel", "Software"),
        "netlify.com": _service("Netlify", "Software"),
        "heroku.com": _service("Heroku", "Software"),
        "digitalocean.com": _service("DigitalOcean", "Software"),
        "supabase.com": _service("Supabase", "Software"),
        "stripe.com": _service("Stripe", "Software"),
        "paddle.com": _service("Paddle", "Software"),
        "hotstar.com": _service("Disney+ Hotstar", "Streaming"),
        "jiocinema.com": _service("JioCinema", "Streaming"),
        "sonyliv.com": _service("SonyLIV", "Streaming"),
        "zee5.com": _service("ZEE5", "Streaming"),
        "voot.com": _service("Voot", "Streaming"),
    }
)
