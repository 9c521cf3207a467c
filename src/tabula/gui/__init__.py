"""NiceGUI viewer for tabula (imports nicegui; keep out of tabula.core)."""
