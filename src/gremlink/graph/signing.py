"""SigV4 request signing for IAM-authenticated Neptune connections.

The WebSocket handshake is signed like an HTTPS GET against the same host,
port and path; the resulting headers are sent with the upgrade request.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from botocore.auth import SigV4Auth
from botocore.awsrequest import AWSRequest
from botocore.credentials import Credentials as BotoCredentials

from gremlink.core.errors import MissingCredentials, MissingEndpoint

logger = logging.getLogger(__name__)

NEPTUNE_SERVICE = "neptune-db"
DEFAULT_REGION = "us-east-1"


@dataclass
class Credentials:
    """Explicit AWS credentials. Missing fields fall back to the environment."""

    access_key_id: str | None = None
    secret_access_key: str | None = None
    session_token: str | None = None
    region: str | None = None

    def resolve(self) -> Credentials:
        """Fill unset fields from the standard AWS environment variables."""
        return Credentials(
            access_key_id=self.access_key_id or os.getenv("AWS_ACCESS_KEY_ID"),
            secret_access_key=self.secret_access_key or os.getenv("AWS_SECRET_ACCESS_KEY"),
            session_token=self.session_token or os.getenv("AWS_SESSION_TOKEN"),
            region=(
                self.region
                or os.getenv("AWS_DEFAULT_REGION")
                or os.getenv("AWS_REGION")
                or DEFAULT_REGION
            ),
        )


class RequestSigner:
    """Produces SigV4 authentication headers for a host/port/path."""

    def __init__(self, service: str = NEPTUNE_SERVICE) -> None:
        self._service = service

    def sign(
        self,
        host: str | None,
        port: int | None,
        path: str,
        credentials: Credentials | None = None,
    ) -> dict[str, str]:
        """Sign a GET request to ``https://{host}:{port}{path}``.

        Args:
            host: Database hostname (cluster writer endpoint).
            port: Database port, typically 8182.
            path: Request path, e.g. "/gremlin".
            credentials: Optional explicit credentials.

        Returns:
            Headers including Host, X-Amz-Date, Authorization and, for
            temporary credentials, X-Amz-Security-Token.

        Raises:
            MissingEndpoint: If host or port is absent.
            MissingCredentials: If access key or secret key cannot be resolved.
        """
        if not host or not port:
            raise MissingEndpoint("Host and port are required")

        creds = (credentials or Credentials()).resolve()
        if not creds.access_key_id or not creds.secret_access_key:
            raise MissingCredentials("Access key and secret key are required")

        netloc = f"{host}:{port}"
        request = AWSRequest(method="GET", url=f"https://{netloc}{path}", headers={"Host": netloc})
        SigV4Auth(
            BotoCredentials(creds.access_key_id, creds.secret_access_key, creds.session_token),
            self._service,
            creds.region,
        ).add_auth(request)

        logger.debug(f"Signed {path} on {netloc} for region {creds.region}")
        return dict(request.headers.items())
