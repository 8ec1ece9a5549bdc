# checkout_backend.config
from pathlib import Path
from dataclasses import dataclass
from typing import Optional, Tuple
from urllib.parse import urlparse
import os
from dotenv import load_dotenv

from checkout_backend.errors import ConfigurationError

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
# Les variables déjà exportées par le process (Render, tests) restent prioritaires
load_dotenv(dotenv_path=ENV_PATH, override=False)

"""
Configuration centrale du backend checkout.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Nettoie les valeurs d'environnement (Stripe, Resend, Klaviyo, CORS)
- Expose un instantané immuable `Settings` construit à l'appel (load_settings)
- validate_settings() lève ConfigurationError si un secret/URL obligatoire manque
"""

DEFAULT_PRODUCTS_PATH = BASE_DIR / "products.json"
DEFAULT_FREE_SHIPPING_THRESHOLD_CENTS = 15000
DEFAULT_PORT = 10000


def _clean_env(v: Optional[str]) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")


def _env(name: str, default: str = "") -> str:
    return _clean_env(os.getenv(name)) or default


def _split_csv(value: str) -> Tuple[str, ...]:
    return tuple(p.strip() for p in (value or "").split(",") if p.strip())


def _parse_cents(name: str, raw: str) -> Optional[int]:
    # Montant optionnel en centimes: vide => None, sinon entier >= 0
    if not raw:
        return None
    try:
        value = int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer amount in cents (got {raw!r})")
    if value < 0:
        raise ConfigurationError(f"{name} must be >= 0 (got {value})")
    return value


def _parse_port(raw: str) -> int:
    # Port d'écoute: vide => 10000, sinon entier entre 1 et 65535
    if not raw:
        return DEFAULT_PORT
    try:
        value = int(raw)
    except ValueError:
        raise ConfigurationError(f"PORT must be an integer (got {raw!r})")
    if not 1 <= value <= 65535:
        raise ConfigurationError(f"PORT must be between 1 and 65535 (got {value})")
    return value


@dataclass(frozen=True)
class Settings:
    # Stripe: clé secrète, secret webhook et version d'API figée
    stripe_secret_key: str = ""
    stripe_webhook_secret: str = ""
    stripe_api_version: str = "2024-06-20"

    # Site et redirections du checkout
    site_url: str = ""
    allowed_origins: Tuple[str, ...] = ()
    checkout_success_path: str = "/success.html"
    checkout_cancel_path: str = "/cancel.html"

    # Catalogue et politique de livraison
    products_path: Path = DEFAULT_PRODUCTS_PATH
    currency: str = "usd"
    shipping_flat_rate_cents: str = ""
    free_shipping_threshold_cents: str = ""
    shipping_countries: Tuple[str, ...] = ("US",)
    metadata_source: str = "jhinton-site"

    # Emails de commande (Resend)
    brand_name: str = "J.HINTON"
    resend_api_key: str = ""
    from_email: str = "orders@j-hinton.com"
    internal_order_email: str = ""

    # Liste marketing (Klaviyo)
    klaviyo_private_key: str = ""
    klaviyo_list_id: str = ""
    klaviyo_revision: str = "2024-10-15"

    port: int = DEFAULT_PORT

    @property
    def site_base_url(self) -> str:
        return self.site_url.rstrip("/")

    @property
    def cors_origins(self) -> Tuple[str, ...]:
        """Allow-list CORS: ALLOWED_ORIGINS sinon SITE_URL, sans slash final."""
        origins = self.allowed_origins or ((self.site_url,) if self.site_url else ())
        return tuple(o.rstrip("/") for o in origins if o and o != "*")

    @property
    def flat_rate_override(self) -> Optional[int]:
        return _parse_cents("SHIPPING_FLAT_RATE_CENTS", self.shipping_flat_rate_cents)

    @property
    def free_shipping_threshold(self) -> int:
        value = _parse_cents("FREE_SHIPPING_THRESHOLD_CENTS", self.free_shipping_threshold_cents)
        return DEFAULT_FREE_SHIPPING_THRESHOLD_CENTS if value is None else value


def load_settings() -> Settings:
    """
    Construit Settings depuis l'environnement courant.
    - Lecture à l'appel (et non à l'import) pour permettre aux tests de fournir leur env.
    - Aucune validation ici: voir validate_settings().
    """
    products_path = _env("PRODUCTS_PATH")
    return Settings(
        stripe_secret_key=_env("STRIPE_SECRET_KEY"),
        stripe_webhook_secret=_env("STRIPE_WEBHOOK_SECRET"),
        stripe_api_version=_env("STRIPE_API_VERSION", "2024-06-20"),
        site_url=_env("SITE_URL"),
        allowed_origins=_split_csv(_env("ALLOWED_ORIGINS")),
        checkout_success_path=_env("CHECKOUT_SUCCESS_PATH", "/success.html"),
        checkout_cancel_path=_env("CHECKOUT_CANCEL_PATH", "/cancel.html"),
        products_path=Path(products_path) if products_path else DEFAULT_PRODUCTS_PATH,
        currency=_env("CURRENCY", "usd").lower(),
        shipping_flat_rate_cents=_env("SHIPPING_FLAT_RATE_CENTS"),
        free_shipping_threshold_cents=_env("FREE_SHIPPING_THRESHOLD_CENTS"),
        shipping_countries=_split_csv(_env("SHIPPING_COUNTRIES", "US")) or ("US",),
        metadata_source=_env("METADATA_SOURCE", "jhinton-site"),
        brand_name=_env("BRAND_NAME", "J.HINTON"),
        resend_api_key=_env("RESEND_API_KEY"),
        from_email=_env("FROM_EMAIL", "orders@j-hinton.com"),
        internal_order_email=_env("INTERNAL_ORDER_EMAIL"),
        klaviyo_private_key=_env("KLAVIYO_PRIVATE_KEY"),
        klaviyo_list_id=_env("KLAVIYO_LIST_ID"),
        klaviyo_revision=_env("KLAVIYO_REVISION", "2024-10-15"),
        port=_parse_port(_env("PORT")),
    )


def validate_settings(settings: Settings) -> Settings:
    """
    Vérifie la configuration obligatoire au démarrage (fatal si invalide).
    - STRIPE_SECRET_KEY et SITE_URL requis
    - SITE_URL doit être une URL http(s)
    - montants de livraison optionnels: entiers >= 0
    """
    if not settings.stripe_secret_key:
        raise ConfigurationError("Missing STRIPE_SECRET_KEY")
    if not settings.site_url:
        raise ConfigurationError("Missing SITE_URL")
    parsed = urlparse(settings.site_url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigurationError(f"SITE_URL must be an absolute http(s) URL (got {settings.site_url!r})")
    # Déclenche le parsing des montants optionnels
    settings.flat_rate_override
    settings.free_shipping_threshold
    return settings
