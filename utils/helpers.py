"""
General helper functions (non-domain specific utilities)

Note: Domain-specific business logic should be in services/
"""
import secrets
import uuid
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP


ADJECTIVES = [
    "brave", "calm", "clever", "cosy", "eager", "fancy", "gentle", "happy",
    "jolly", "kind", "lucky", "mighty", "nimble", "proud", "quick", "quiet",
    "shiny", "silly", "sunny", "swift", "tidy", "witty", "zany", "zesty",
]

COLORS = [
    "amber", "azure", "beige", "black", "blue", "bronze", "coral", "crimson",
    "cyan", "gold", "gray", "green", "indigo", "ivory", "lime", "magenta",
    "maroon", "olive", "orange", "pink", "plum", "purple", "red", "silver",
    "teal", "violet", "white", "yellow",
]

ANIMALS = [
    "badger", "beaver", "camel", "cobra", "crane", "dingo", "eagle", "ferret",
    "gecko", "heron", "ibis", "jackal", "koala", "lemur", "llama", "lynx",
    "marmot", "moose", "newt", "otter", "panda", "puffin", "quokka", "raven",
    "salmon", "tapir", "toucan", "walrus", "wombat", "yak", "zebra",
]

CENT = Decimal("0.01")


def generate_slug():
    """Readable public group identifier, e.g. ``jolly_teal_otter``."""
    return "_".join(secrets.choice(words) for words in (ADJECTIVES, COLORS, ANIMALS))


def generate_token():
    return str(uuid.uuid4())


def parse_amount(value):
    """
    Convert a user-entered amount in major units to integer cents.

    Accepts "12.34", "$1,234.5", 12.34 or 12. Rounds half up to the cent.

    Returns:
        int cents, or None if the value is empty

    Raises:
        ValueError: If the value is not a number
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, str):
        value = value.strip().replace(",", "").lstrip("$").strip()
        if not value:
            return None

    try:
        amount = Decimal(str(value))
        if not amount.is_finite():
            raise ValueError(f"Not an amount: {value!r}")
        cents = amount.quantize(CENT, rounding=ROUND_HALF_UP) * 100
    except InvalidOperation:
        raise ValueError(f"Not an amount: {value!r}")

    return int(cents)


def format_cents(cents, symbol="$"):
    sign = "-" if cents < 0 else ""
    whole, frac = divmod(abs(int(cents)), 100)
    return f"{sign}{symbol}{whole:,}.{frac:02d}"
