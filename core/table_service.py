# core/table_service.py
import logging
from urllib.parse import urljoin

from core.config import PUBLIC_MENU_URL
from core.errors import ValidationError
from models.table import Table

logger = logging.getLogger(__name__)


def _payload(table_number=None, location=None, menu_id=None) -> dict:
    payload = {}
    if table_number is not None:
        try:
            number = int(table_number)
        except (TypeError, ValueError):
            raise ValidationError("Table number must be a whole number", field="table_number")
        if number <= 0:
            raise ValidationError("Table number must be greater than 0", field="table_number")
        payload["tableNumber"] = number
    if location is not None:
        payload["location"] = location
    if menu_id is not None:
        payload["menuId"] = int(menu_id)
    return payload


def list_tables(api):
    return [Table.model_validate(t) for t in api.get("/tables") or []]


def get_table(api, table_id: int) -> Table:
    return Table.model_validate(api.get(f"/tables/{table_id}"))


def list_tables_by_menu(api, menu_id: int):
    return [Table.model_validate(t) for t in api.get(f"/tables/menu/{menu_id}") or []]


def find_table_by_number(api, table_number):
    """Resolve the table behind a scanned QR code; None when unknown."""
    for table in list_tables(api):
        if str(table.table_number) == str(table_number):
            return table
    return None


def create_table(api, table_number, menu_id, location: str = None, image_path: str = None) -> Table:
    if menu_id is None:
        raise ValidationError("Please select a menu", field="menu_id")
    if table_number is None:
        raise ValidationError("Table number is required", field="table_number")
    payload = _payload(table_number, location, menu_id)
    return Table.model_validate(api.send_with_image("POST", "/tables", payload, image_path))


def update_table(api, table_id: int, table_number=None, location: str = None, menu_id=None, image_path: str = None) -> Table:
    payload = _payload(table_number, location, menu_id)
    return Table.model_validate(api.send_with_image("PUT", f"/tables/{table_id}", payload, image_path))


def delete_table(api, table_id: int):
    data = api.delete(f"/tables/{table_id}")
    logger.info("Deleted table #%s", table_id)
    return data


def table_qr_url(table: Table, public_base: str = PUBLIC_MENU_URL) -> str:
    """Public menu link encoded in the table's QR code."""
    return urljoin(public_base.rstrip("/") + "/", f"table/{table.table_number}")


def qr_file_name(table: Table) -> str:
    return f"table-{table.table_number}-qrcode.png"


def download_table_qr(api, table: Table, dest: str) -> str:
    """Save the server-issued QR code image of a table to `dest`."""
    if not table.qr_code_url:
        raise ValidationError(f"{table.label} has no QR code yet", field="qr_code_url")
    api.download(table.qr_code_url, dest)
    logger.info("Saved QR code of %s to %s", table.label, dest)
    return dest
