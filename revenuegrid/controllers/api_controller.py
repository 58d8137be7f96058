import logging
from datetime import datetime, timezone
from typing import Optional

import requests

from ..utils.configuration import Persistence
from ..utils.snapshot import TableSnapshot
from .store_controller import PollingStore, StoreException


logger = logging.getLogger(__name__)


class APIException(StoreException):
    pass


class APIController(PollingStore):
    """
    Stores tables in a PostgREST style REST api (one row per table, keyed on table_name).
    """
    def __init__(self, persistence: Persistence, timeout: int = 10):
        super().__init__(poll_interval=persistence.poll_interval)

        self.base_url = persistence.api_url.rstrip("/")
        self.api_key = persistence.api_key
        self.table = persistence.api_table

        self.timeout = timeout

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/rest/v1/{self.table}"

    def _get_headers(self, prefer: str = None) -> dict:
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

        if prefer is not None:
            headers["Prefer"] = prefer

        return headers

    def _perform_request(
        self,
        request_type,
        url: str,
        headers: dict = None,
        json: dict = None,
        params: dict = None,
    ) -> requests.Response:
        try:
            response = request_type(
                url, headers=headers, json=json, params=params, timeout=self.timeout
            )
            response.raise_for_status()
        except requests.exceptions.Timeout:
            logger.warning("Request to '%s' timed out", url)
            raise APIException("Timeout")
        except requests.exceptions.HTTPError as e:
            logger.warning("Request to '%s' failed: %s", url, e)
            raise APIException(f"HTTPError: {e}")
        except requests.exceptions.RequestException as e:
            logger.warning("Request to '%s' failed: %s", url, e)
            raise APIException("Request failed")

        return response

    def _read_rows(self, response: requests.Response) -> list:
        try:
            rows = response.json()
        except ValueError:
            raise APIException("Response is not valid json")

        if not isinstance(rows, list):
            raise APIException("Expected a list of rows")

        return rows

    def load(self, table_name: str) -> Optional[TableSnapshot]:
        response = self._perform_request(
            request_type=requests.get,
            url=self.endpoint,
            headers=self._get_headers(),
            params={
                "table_name": f"eq.{table_name}",
                "select": "*",
            },
        )

        rows = self._read_rows(response)

        # NOTE: no row means the table was never saved
        if len(rows) == 0:
            return

        return TableSnapshot.from_dict(rows[0])

    def save(self, table_name, column_labels, row_labels, cells) -> TableSnapshot:
        snapshot = TableSnapshot(
            table_name=table_name,
            column_labels=list(column_labels),
            row_labels=list(row_labels),
            cells={row: dict(values) for row, values in cells.items()},
            updated_at=datetime.now(timezone.utc),
        )

        # Insert, or update the existing row with the same table_name
        response = self._perform_request(
            request_type=requests.post,
            url=self.endpoint,
            headers=self._get_headers(prefer="resolution=merge-duplicates,return=representation"),
            json=snapshot.to_dict(),
            params={"on_conflict": "table_name"},
        )

        rows = self._read_rows(response)

        if len(rows) == 0:
            return snapshot

        return TableSnapshot.from_dict(rows[0])

    def get_updated_at(self, table_name: str) -> Optional[str]:
        response = self._perform_request(
            request_type=requests.get,
            url=self.endpoint,
            headers=self._get_headers(),
            params={
                "table_name": f"eq.{table_name}",
                "select": "updated_at",
            },
        )

        rows = self._read_rows(response)

        if len(rows) == 0:
            return

        return rows[0].get("updated_at")
