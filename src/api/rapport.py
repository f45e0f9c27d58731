"""
Monthly Report Webhook Client

Asks the external report service to generate the monthly report and email it.
"""

import logging
import threading
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import List, MutableMapping, Optional, Tuple

import requests

from config.settings import settings, MONTH_MAP, RAPPORT_ENDPOINT_PATH

logger = logging.getLogger(__name__)

MISSING_CONFIG_MESSAGE = "Configuration API manquante"
GENERIC_FAILURE_MESSAGE = "Erreur lors de la génération"
UNKNOWN_ERROR_MESSAGE = "Erreur inconnue"
IN_PROGRESS_MESSAGE = "Génération en cours..."

SESSION_CLIENT_KEY = "report_client"


class ReportStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class ReportConfig:
    """Webhook settings injected into the client."""
    api_url: str
    webhook_secret: str
    timeout: Optional[float] = None

    @classmethod
    def from_settings(cls) -> "ReportConfig":
        return cls(
            api_url=settings.api_url,
            webhook_secret=settings.webhook_secret,
            timeout=settings.api_timeout,
        )

    @property
    def is_complete(self) -> bool:
        return bool(self.api_url) and bool(self.webhook_secret)


@dataclass(frozen=True)
class ReportResult:
    """Outcome of a generate() call, ready for display."""
    status: ReportStatus
    message: str
    description: str = ""

    @property
    def ok(self) -> bool:
        return self.status == ReportStatus.SUCCESS


class ReportRequestClient:
    """
    Sends one report-generation request at a time.

    State goes idle -> loading -> success | error. While a request is in
    flight, further calls return immediately without touching the network.
    """

    def __init__(self, config: ReportConfig, session: Optional[requests.Session] = None):
        """
        Initialize the report client.

        Args:
            config: Webhook URL, shared secret and transport timeout
            session: HTTP session (a new requests.Session by default)
        """
        self.config = config
        self.session = session or requests.Session()
        self.status = ReportStatus.IDLE
        self.message = ""
        self._in_flight = threading.Lock()

    @property
    def endpoint(self) -> str:
        return f"{self.config.api_url.rstrip('/')}{RAPPORT_ENDPOINT_PATH}"

    @property
    def is_loading(self) -> bool:
        return self.status == ReportStatus.LOADING

    @staticmethod
    def build_payload(month: int, year: int) -> dict:
        return {
            "mois": int(month),
            "annee": int(year),
            "envoyer_email": True,
            # None -> the service uses the default admin address
            "email_destinataire": None,
        }

    def _headers(self) -> dict:
        return {
            "Content-Type": "application/json",
            "X-Webhook-Secret": self.config.webhook_secret,
        }

    @staticmethod
    def _error_detail(response: requests.Response) -> str:
        """Extract the `detail` field of an error body, if any."""
        try:
            data = response.json()
        except ValueError:
            return GENERIC_FAILURE_MESSAGE
        if isinstance(data, dict) and data.get("detail"):
            return str(data["detail"])
        return GENERIC_FAILURE_MESSAGE

    def _send(self, month: int, year: int) -> None:
        """
        Perform the POST request.

        Raises:
            ReportConfigurationError: If the URL or secret is missing
            ReportRequestError: If the service answers with a non-2xx status
            requests.RequestException: If no response is received
        """
        if not self.config.is_complete:
            raise ReportConfigurationError(MISSING_CONFIG_MESSAGE)

        response = self.session.post(
            self.endpoint,
            json=self.build_payload(month, year),
            headers=self._headers(),
            timeout=self.config.timeout,
        )
        if not 200 <= response.status_code < 300:
            raise ReportRequestError(self._error_detail(response), status_code=response.status_code)

    def generate(self, month: int, year: int) -> ReportResult:
        """
        Request generation of the report for a month.

        Args:
            month: Month number (1-12)
            year: Year (e.g. 2025)

        Returns:
            ReportResult with the final status and a French message
        """
        if not 1 <= int(month) <= 12:
            raise ValueError(f"Invalid month: {month}")

        if not self._in_flight.acquire(blocking=False):
            return ReportResult(status=ReportStatus.LOADING, message=IN_PROGRESS_MESSAGE)

        try:
            self.status = ReportStatus.LOADING
            self.message = ""
            month_label = MONTH_MAP.get(int(month), str(month))

            try:
                self._send(month, year)
            except (ReportConfigurationError, ReportRequestError) as e:
                logger.warning("Report generation for %s/%s failed: %s", month, year, e)
                return self._settle(ReportStatus.ERROR, str(e))
            except requests.RequestException as e:
                logger.error("Report service unreachable: %s", e)
                return self._settle(ReportStatus.ERROR, UNKNOWN_ERROR_MESSAGE)

            logger.info("Report %s/%s requested successfully", month, year)
            return self._settle(
                ReportStatus.SUCCESS,
                f"Rapport {month_label} {year} envoyé avec succès !",
                f"Le rapport de {month_label} {year} a été envoyé par email.",
            )
        finally:
            self._in_flight.release()

    def _settle(self, status: ReportStatus, message: str, description: str = "") -> ReportResult:
        self.status = status
        self.message = message
        return ReportResult(status=status, message=message, description=description)


def session_report_client(
    state: MutableMapping,
    config: Optional[ReportConfig] = None,
    session: Optional[requests.Session] = None
) -> ReportRequestClient:
    """
    Report client owned by one browser session.

    Args:
        state: Per-session storage (st.session_state on the dashboard)
        config: Webhook settings (from settings by default)
        session: HTTP session passed to a newly created client

    Returns:
        The client stored in state, created on first use
    """
    if SESSION_CLIENT_KEY not in state:
        state[SESSION_CLIENT_KEY] = ReportRequestClient(config or ReportConfig.from_settings(), session=session)
    return state[SESSION_CLIENT_KEY]


def default_report_period(today: Optional[date] = None) -> Tuple[int, int]:
    """
    Default (month, year) selection: the previous calendar month.

    Args:
        today: Reference date (defaults to today)

    Returns:
        Tuple of (month, year)
    """
    today = today or date.today()
    if today.month == 1:
        return 12, today.year - 1
    return today.month - 1, today.year


def available_report_years(today: Optional[date] = None) -> List[int]:
    """Selectable years: the current year and the two before it."""
    year = (today or date.today()).year
    return [year - 2, year - 1, year]


class ReportConfigurationError(Exception):
    """Raised when the report webhook URL or secret is missing."""
    pass


class ReportRequestError(Exception):
    """Raised when the report service rejects the request."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
