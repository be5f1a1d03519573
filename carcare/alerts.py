"""Alert services: where scheduled reminder alerts are registered."""

import logging
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

logger = logging.getLogger(__name__)


@dataclass
class ScheduledAlert:
    """A timed alert bound to a reminder."""

    alert_id: str
    fire_at: date
    reminder_id: str
    title: str
    body: Optional[str] = None

    @property
    def payload(self) -> Dict[str, Any]:
        return {"reminder_id": self.reminder_id, "title": self.title, "body": self.body}


class AlertService:
    """
    Contract for the alert registry.

    register() and cancel() are keyed by alert id and must be idempotent:
    registering an id replaces any alert already held under it.
    """

    def request_authorization(self) -> bool:
        raise NotImplementedError

    def register(self, alert: ScheduledAlert) -> None:
        raise NotImplementedError

    def cancel(self, alert_id: str) -> None:
        raise NotImplementedError

    def pending(self) -> List[ScheduledAlert]:
        raise NotImplementedError


class MemoryAlertService(AlertService):
    """Alert registry held in memory."""

    def __init__(self, authorized: bool = True):
        self.authorized = authorized
        self.authorization_requests = 0
        self._alerts: Dict[str, ScheduledAlert] = {}

    def request_authorization(self) -> bool:
        self.authorization_requests += 1
        return self.authorized

    def register(self, alert: ScheduledAlert) -> None:
        self._alerts[alert.alert_id] = alert

    def cancel(self, alert_id: str) -> None:
        self._alerts.pop(alert_id, None)

    def pending(self) -> List[ScheduledAlert]:
        return sorted(self._alerts.values(), key=lambda a: (a.fire_at, a.alert_id))

    def get(self, alert_id: str) -> Optional[ScheduledAlert]:
        return self._alerts.get(alert_id)


def _alert_to_dict(alert: ScheduledAlert) -> Dict[str, Any]:
    d: Dict[str, Any] = {
        "fireAt": alert.fire_at.isoformat(),
        "reminderId": alert.reminder_id,
        "title": alert.title,
    }
    if alert.body is not None:
        d["body"] = alert.body
    return d


def _alert_from_dict(alert_id: str, dct: Dict[str, Any]) -> ScheduledAlert:
    fire_at = dct["fireAt"]
    if not isinstance(fire_at, date):
        fire_at = date.fromisoformat(fire_at)
    return ScheduledAlert(
        alert_id=alert_id,
        fire_at=fire_at,
        reminder_id=dct["reminderId"],
        title=dct["title"],
        body=dct.get("body"),
    )


class FileAlertService(AlertService):
    """
    Alert registry persisted as a YAML mapping of alert id to alert.

    deliver_due() hands out alerts whose day has come and removes them, so
    each alert is delivered once.
    """

    def __init__(self, filename: Union[str, Path], authorized: bool = True):
        self.path = Path(filename)
        self.authorized = authorized

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        with open(self.path, "r") as fp:
            return yaml.load(fp, Loader=yaml.SafeLoader) or {}

    def _save(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        with open(tmp_path, "w") as fp:
            yaml.dump(data, fp, default_flow_style=False, allow_unicode=True, sort_keys=True)
        tmp_path.replace(self.path)

    def request_authorization(self) -> bool:
        return self.authorized

    def register(self, alert: ScheduledAlert) -> None:
        data = self._read()
        data[alert.alert_id] = _alert_to_dict(alert)
        self._save(data)

    def cancel(self, alert_id: str) -> None:
        data = self._read()
        if data.pop(alert_id, None) is not None:
            self._save(data)

    def pending(self) -> List[ScheduledAlert]:
        alerts = [_alert_from_dict(k, v) for k, v in self._read().items()]
        return sorted(alerts, key=lambda a: (a.fire_at, a.alert_id))

    def deliver_due(self, today: date) -> List[ScheduledAlert]:
        """Remove and return every alert with fire_at on or before today."""
        data = self._read()
        alerts = [_alert_from_dict(k, v) for k, v in data.items()]
        due = [a for a in alerts if a.fire_at <= today]
        if due:
            for alert in due:
                del data[alert.alert_id]
            self._save(data)
            logger.info("Delivered %d alert(s)", len(due))
        return sorted(due, key=lambda a: (a.fire_at, a.alert_id))
