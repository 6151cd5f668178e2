# fitcoach/cli/export.py
import csv
import os
from datetime import datetime

import click
from flask.cli import AppGroup

from fitcoach.models.user import User
from fitcoach.models.wearable import HealthData

export_group = AppGroup("export", help="Comandos de exportación (CSV, etc.)")

HEALTH_FIELDS = ["recorded_at", "data_type", "value", "unit", "source"]


@export_group.command("health-data")
@click.option("--user", "email", required=True, help="Email del usuario")
@click.option("--to", "dest_path", default=None,
              help="Ruta destino del CSV (por defecto: instance/health_<id>_YYYYMMDD.csv)")
def export_health_data(email, dest_path):
    """
    Exporta los datos de salud de un usuario a CSV (orden cronológico).
    """
    user = User.query.filter_by(email=email.strip().lower()).first()
    if not user:
        click.secho(f"No existe el usuario: {email}", fg="red")
        return

    if not dest_path:
        ts = datetime.now().strftime("%Y%m%d")
        dest_path = os.path.join("instance", f"health_{user.id}_{ts}.csv")
    os.makedirs(os.path.dirname(dest_path) or ".", exist_ok=True)

    rows = (
        HealthData.query.filter_by(user_id=user.id)
        .order_by(HealthData.recorded_at.asc(), HealthData.id.asc())
        .all()
    )
    with open(dest_path, "w", newline="", encoding="utf-8") as fh:
        writer = csv.DictWriter(fh, fieldnames=HEALTH_FIELDS)
        writer.writeheader()
        for h in rows:
            writer.writerow({
                "recorded_at": h.recorded_at.isoformat(),
                "data_type": h.data_type,
                "value": h.value,
                "unit": h.unit,
                "source": h.source,
            })

    click.secho(f"Exportados {len(rows)} registros a: {dest_path}", fg="green")
