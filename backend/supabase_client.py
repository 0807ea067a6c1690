#Purpose: The hosted backend “adapter/client” (Supabase REST / PostgREST).
#Sole responsibility: talk to the backend via HTTP and return decoded JSON.
#Encapsulates backend-specific details:
#project URL + anon key headers
#URL construction (/rest/v1/<table>, /rest/v1/rpc/<function>)
#timeouts + bounded retries on transient statuses
#mapping transport/HTTP failures to ProviderError
#It should not contain matching rules or row parsing (see trip_repository.py).

import logging
import os
from typing import Any, Dict, Optional

import requests
from dotenv import load_dotenv
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from trips.providers import ProviderError

# Example in .env:
# SUPABASE_URL=https://<project>.supabase.co
# SUPABASE_ANON_KEY=...
# SUPABASE_TIMEOUT=10
# SUPABASE_MAX_RETRIES=3
load_dotenv()

logger = logging.getLogger(__name__)

RETRY_STATUSES = (429, 500, 502, 503, 504)


class SupabaseClient:
    """
    Hosted backend client.

    Constructed explicitly and passed to the providers that need it;
    there is no module-level client instance.
    """
    def __init__(
        self,
        url: Optional[str] = None,
        anon_key: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        session: Optional[requests.Session] = None,
    ):
        self.url = (url or os.getenv("SUPABASE_URL") or "").rstrip("/")
        self.anon_key = anon_key or os.getenv("SUPABASE_ANON_KEY")
        self.timeout = timeout if timeout is not None else float(os.getenv("SUPABASE_TIMEOUT", "10"))
        retries = max_retries if max_retries is not None else int(os.getenv("SUPABASE_MAX_RETRIES", "3"))

        if not self.url:
            raise ValueError("Supabase URL not set. Please set SUPABASE_URL in the .env file.")
        if not self.anon_key:
            raise ValueError("Supabase anon key not set. Please set SUPABASE_ANON_KEY in the .env file.")

        self.session = session or self._build_session(retries)
        self.session.headers.update({
            "apikey": self.anon_key,
            "Authorization": f"Bearer {self.anon_key}",
            "Accept": "application/json",
        })

    @staticmethod
    def _build_session(retries: int) -> requests.Session:
        session = requests.Session()
        retry = Retry(
            total=retries,
            backoff_factor=0.3,
            status_forcelist=RETRY_STATUSES,
            # rpc reads go over POST
            allowed_methods=frozenset({"GET", "POST"}),
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        session.mount("https://", adapter)
        session.mount("http://", adapter)
        return session

    #----------------
    # Public methods
    #----------------
    def select(self, table: str, params: Dict[str, str]) -> Any:
        """
        GET /rest/v1/<table> with PostgREST query params
        (select=..., <column>=gte.<value>, order=<column>.asc, ...).
        """
        return self._request("GET", f"{self.url}/rest/v1/{table}", params=params)

    def rpc(self, function: str, payload: Dict[str, Any]) -> Any:
        """
        POST /rest/v1/rpc/<function> with named arguments as JSON.
        """
        return self._request("POST", f"{self.url}/rest/v1/rpc/{function}", json=payload)

    def _request(self, method: str, url: str, **kwargs) -> Any:
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            raise ProviderError(f"{method} {url} failed: {exc}") from exc

        if not response.ok:
            logger.error("Backend %s %s answered HTTP %s: %s", method, url, response.status_code, response.text)
            raise ProviderError(f"{method} {url} answered HTTP {response.status_code}")

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ProviderError(f"{method} {url} returned a non-JSON body") from exc
