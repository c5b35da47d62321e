"""
API HTTP de la demo de versionado.

Esta capa registra los endpoints versionados (`/api/v{N}/...`), el middleware
que resuelve la versión de cada request y las rutas de documentación
(`/v3/api-docs`, `/swagger-ui.html`). La lógica vive en `versioning_core`.
"""
