"""Request dependency for FastAPI.

Provides the incoming request as a `~clientorigin.Request`, with the client
resolved behind trusted proxies, as a FastAPI dependency.
"""

from collections.abc import Iterable

from fastapi import Request as FastAPIRequest

from ._factory import RequestFactory
from ._ipmatch import ProxyRangeSet
from ._models import Request
from ._starlette import server_request_from_starlette

__all__ = ["RequestDependency", "request_dependency"]


class RequestDependency:
    """Provides the resolved `~clientorigin.Request` as a dependency.

    No proxies are trusted until `initialize` is called.

    Notes
    -----
    Call ``request_dependency.initialize()`` during application startup,
    normally from the lifespan hook:

    .. code-block:: python

       @asynccontextmanager
       async def lifespan(app: FastAPI) -> AsyncIterator[None]:
           request_dependency.initialize(config.trusted_proxies)
           yield


       app = FastAPI(lifespan=lifespan)
    """

    def __init__(self) -> None:
        self._proxies = ProxyRangeSet()

    def initialize(self, proxies: Iterable[str] | ProxyRangeSet) -> None:
        """Set the trusted proxies.

        Raises
        ------
        InvalidProxyPatternError
            Raised if one of the proxies is not a valid address or network.
        """
        if not isinstance(proxies, ProxyRangeSet):
            proxies = ProxyRangeSet(proxies)
        self._proxies = proxies

    async def __call__(self, request: FastAPIRequest) -> Request:
        """Return the request with the client resolved."""
        server_request = await server_request_from_starlette(request)
        factory = RequestFactory(self._proxies)
        return factory.create_request(server_request)


request_dependency = RequestDependency()
"""The dependency that will return the resolved request."""
