"""Оформление чертежа: размеры, компоновка листа, экспорт в SVG и DXF."""
