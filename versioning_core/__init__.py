"""
Core de la API versionada: matching de paths por versión, grupos OpenAPI,
build-info y arranque del servidor.

Este paquete no depende de las rutas concretas de `api/`; la capa HTTP lo usa
para despachar requests y documentar los endpoints.
"""
