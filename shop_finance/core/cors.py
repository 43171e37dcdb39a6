from fastapi.middleware.cors import CORSMiddleware


class APICORSMiddleware(CORSMiddleware):
    """
    CORSMiddleware restricted to the data API.

    Paths under `exempt_prefixes` pass straight through so endpoints that
    answer their own preflight (the invite function) keep their headers.
    """

    def __init__(self, app, exempt_prefixes: tuple[str, ...] = (), **kwargs):
        super().__init__(app, **kwargs)
        self.exempt_prefixes = tuple(exempt_prefixes)

    async def __call__(self, scope, receive, send) -> None:
        if scope["type"] == "http" and scope["path"].startswith(self.exempt_prefixes):
            await self.app(scope, receive, send)
            return
        await super().__call__(scope, receive, send)
