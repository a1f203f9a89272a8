import logging
from typing import Dict, Optional

from pydantic import BaseModel, JsonValue

from teamdash.gateways import AuthGateway, Failure, TableGateway

logger = logging.getLogger(__name__)

ACTIVITY_TABLE = "activity_logs"


class ActivityLogEntry(BaseModel):
    team_id: str
    user_id: str
    action_type: str
    action_description: str
    metadata: Dict[str, JsonValue] = {}


class ActivityLogger:
    """
    Append-only activity feed writes.

    Strictly best-effort: called after the response is prepared, and any
    failure is logged and dropped. Nothing is retried.
    """

    def __init__(self, tables: TableGateway, auth: AuthGateway):
        self.tables = tables
        self.auth = auth

    def record(self, entry: ActivityLogEntry) -> None:
        try:
            result = self.tables.insert(ACTIVITY_TABLE, entry.model_dump(mode="json"))
            if isinstance(result, Failure):
                logger.warning(
                    f"Activity log '{entry.action_type}' rejected",
                    extra={"status": result.status_code, "body": result.body},
                )
        except Exception as e:
            logger.error(f"FAILED TO WRITE ACTIVITY LOG: {e}", exc_info=True)

    def record_for_token(
        self,
        token: Optional[str],
        team_id: str,
        action_type: str,
        description: str,
        metadata: Optional[Dict[str, JsonValue]] = None,
    ) -> None:
        """Attribute the entry to whoever ``token`` belongs to; skip if unknown."""
        if not token:
            return
        try:
            identity = self.auth.resolve_user(token)
            if isinstance(identity, Failure):
                logger.info(f"Skipping activity log '{action_type}': token did not resolve")
                return
            entry = ActivityLogEntry(
                team_id=team_id,
                user_id=identity.payload["id"],
                action_type=action_type,
                action_description=description,
                metadata=metadata or {},
            )
        except Exception as e:
            logger.error(f"Could not attribute activity log '{action_type}': {e}", exc_info=True)
            return
        self.record(entry)
