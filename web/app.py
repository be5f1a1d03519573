"""Flask widget host: renders the home-screen widget from the shared snapshot."""

import logging
import os
from datetime import date, datetime
from pathlib import Path

from flask import Flask, jsonify, render_template

# Add parent directory to path for carcare imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from carcare.config import load_settings
from carcare.snapshot import FileSnapshotStore, SnapshotReader, REFRESH_INTERVAL

settings = load_settings(os.environ.get("CARCARE_CONFIG"))
logging.basicConfig(level=settings.log_level)

app = Flask(__name__)
app.config["SHARED_DIR"] = settings.shared_dir


def get_reader() -> SnapshotReader:
    """Reader over the shared app-group directory."""
    return SnapshotReader(FileSnapshotStore(app.config["SHARED_DIR"]))


def format_days(days):
    """Format days until due as the widget shows it."""
    if days is None:
        return "—"
    if days < 0:
        return "Overdue!"
    if days == 0:
        return "today"
    return f"in {days} days"


def format_consumption(value):
    if value is None:
        return "—"
    return f"{value:.1f} L/100km"


def format_money(value):
    if value is None:
        return "—"
    return f"€{value:,.0f}"


def format_price(value):
    if value is None:
        return "—"
    return f"€{value:.3f}/L"


def urgency_color(days) -> str:
    """Get Tailwind color classes for days until due."""
    if days is None:
        return "text-gray-500"
    if days < 0:
        return "text-red-600"
    if days <= 7:
        return "text-orange-500"
    if days <= 30:
        return "text-yellow-600"
    return "text-green-600"


# Register template filters
app.jinja_env.filters["format_days"] = format_days
app.jinja_env.filters["format_consumption"] = format_consumption
app.jinja_env.filters["format_money"] = format_money
app.jinja_env.filters["format_price"] = format_price
app.jinja_env.filters["urgency_color"] = urgency_color


@app.route("/")
def widget():
    """Widget view: next reminders and fuel stats, refreshed hourly."""
    entry = get_reader().timeline(datetime.now())
    today = entry.rendered_at.date()
    reminders = [
        {
            "title": r.title,
            "car_name": r.car_name,
            "days": -1 if r.is_overdue else r.days_until_due(today),
        }
        for r in entry.snapshot.upcoming_reminders
    ]
    response = app.make_response(
        render_template(
            "widget.html",
            snapshot=entry.snapshot,
            reminders=reminders,
            is_placeholder=entry.is_placeholder,
            refresh_at=entry.refresh_at,
        )
    )
    response.headers["Refresh"] = str(int(REFRESH_INTERVAL.total_seconds()))
    return response


@app.route("/widget.json")
def widget_json():
    """Snapshot wire JSON, or the placeholder if none can be read."""
    snapshot, is_placeholder = get_reader().load_or_placeholder(date.today())
    data = snapshot.to_dict()
    data["isPlaceholder"] = is_placeholder
    return jsonify(data)


if __name__ == "__main__":
    app.run(debug=True, port=5001)
