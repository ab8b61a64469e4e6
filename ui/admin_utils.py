"""
Shared helpers for the admin panel tabs
"""
import flet as ft

from ui.toast import close_dialog


def pick_file(page: ft.Page, on_picked, extensions):
    """Open a file dialog; `on_picked(path)` gets the chosen file."""

    def on_result(e: ft.FilePickerResultEvent):
        page.overlay.remove(picker)
        if e.files:
            on_picked(e.files[0].path)
        page.update()

    picker = ft.FilePicker(on_result=on_result)
    page.overlay.append(picker)
    page.update()
    picker.pick_files(allowed_extensions=extensions, allow_multiple=False)


def save_file(page: ft.Page, on_path, file_name: str, extensions=("xlsx",)):
    """Ask where to save `file_name`; `on_path(path)` gets the destination."""

    def on_result(e: ft.FilePickerResultEvent):
        page.overlay.remove(picker)
        if e.path:
            on_path(e.path)
        page.update()

    picker = ft.FilePicker(on_result=on_result)
    page.overlay.append(picker)
    page.update()
    picker.save_file(file_name=file_name, allowed_extensions=list(extensions))


def confirm_dialog(page: ft.Page, title: str, message: str, on_confirm, confirm_label="Delete"):
    def confirm(e):
        close_dialog(page, dialog)
        on_confirm()

    dialog = ft.AlertDialog(
        modal=True,
        title=ft.Text(title, size=16, weight="bold"),
        content=ft.Text(message),
        actions=[
            ft.TextButton("Cancel", on_click=lambda e: close_dialog(page, dialog)),
            ft.ElevatedButton(confirm_label, on_click=confirm, bgcolor="red", color="white"),
        ],
    )
    page.open(dialog)


def image_box(src, size=80):
    if src:
        return ft.Image(src=src, width=size, height=size, fit=ft.ImageFit.COVER, border_radius=8)
    return ft.Container(
        width=size,
        height=size,
        bgcolor="grey300",
        border_radius=8,
        alignment=ft.alignment.center,
        content=ft.Icon(ft.Icons.RESTAURANT, size=30, color="grey600"),
    )


def image_picker_field(page: ft.Page, current=None):
    """Preview plus 'Upload Image' button. Returns (controls, state) where state['path'] is the picked file."""
    state = {"path": None}
    preview = ft.Container(
        content=image_box(current, 120),
        width=300,
        height=120,
        border_radius=8,
        alignment=ft.alignment.center,
        border=ft.border.all(1, "grey300"),
    )

    def picked(path):
        state["path"] = path
        preview.content = ft.Image(src=path, width=300, height=120, fit=ft.ImageFit.COVER, border_radius=8)
        page.update()

    button = ft.ElevatedButton(
        "Upload Image",
        icon=ft.Icons.UPLOAD_FILE,
        on_click=lambda e: pick_file(page, picked, ["png", "jpg", "jpeg", "webp"]),
        width=300,
        bgcolor="#FEB23F",
        color="white",
    )
    return [preview, button], state


def import_summary(result) -> str:
    lines = [result.message or "Import finished",
             f"Imported: {result.success}  Failed: {result.failed}  Duplicates: {result.duplicates}"]
    lines.extend(result.errors[:10])
    if len(result.errors) > 10:
        lines.append(f"... and {len(result.errors) - 10} more")
    return "\n".join(lines)
