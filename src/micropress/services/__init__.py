"""Micropub operations: token checks, posts, media, queries, request routing.

Every public service method returns a :class:`~micropress.services.result.ServiceResult`;
only :class:`~micropress.services.micropub.MicropubService` knows about HTTP
status codes. Nothing here imports the web adapter or the CLI.
"""
