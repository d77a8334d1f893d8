"""HTTP client for the Scoop.it REST API."""

import logging
from typing import Any, Optional, Sequence

import httpx

from ..config import (
    API_HOST,
    API_BASE_PATH,
    REQUEST_TIMEOUT,
    MAX_RETRIES,
    BACKOFF_FACTOR,
    TOKEN_LIFETIME,
    TOKEN_RENEWAL_SAFETY_MARGIN,
)
from ..models import (
    CompilationResponse,
    CompilationSort,
    ConnectionTestResponse,
    Post,
    ProfileResponse,
    SearchResults,
    SearchType,
    Topic,
    TopicOrder,
    TopicResponse,
    User,
)
from .auth import Clock, Credentials, Signer, TokenCache, TokenMinter
from .builder import RequestDescriptor, build_url, query_params, serialize_body
from .errors import AuthenticationError, ConfigurationError
from .response import interpret
from .transport import Transport


logger = logging.getLogger(__name__)


class ScoopitClient:
    """Asynchronous client for www.scoop.it with JWT bearer auth.

    Tokens are minted from the application credentials on first use and
    renewed ``token_renewal_safety_margin`` seconds before they expire.

    Example:
        async with ScoopitClient(key, secret, 'jdoe') as client:
            topic = await client.get_topic(url_name='best-of-photojournalism')
    """

    def __init__(self, app_key: str, app_secret: str, user_identifier: str, *,
                 host: str = API_HOST,
                 request_timeout: float = REQUEST_TIMEOUT,
                 token_renewal_safety_margin: float = TOKEN_RENEWAL_SAFETY_MARGIN,
                 token_lifetime: int = TOKEN_LIFETIME,
                 max_retries: int = MAX_RETRIES,
                 backoff_factor: float = BACKOFF_FACTOR,
                 signer: Optional[Signer] = None,
                 http_client: Optional[httpx.AsyncClient] = None,
                 clock: Optional[Clock] = None):
        """Create a client.

        Args:
            app_key: Application key, used as the token issuer
            app_secret: Application secret, used as the HMAC signing key
            user_identifier: User the tokens are minted for (token subject)
            host: API host (scheme + domain)
            request_timeout: Seconds allowed for a whole request/response exchange
            token_renewal_safety_margin: Renew tokens this many seconds before expiry
            token_lifetime: Validity in seconds of each minted token
            max_retries: Transport-level retries on connection errors and
                retryable statuses; 0 disables them
            backoff_factor: Backoff factor between transport retries
            signer: Alternative token signer (defaults to HS256)
            http_client: Pre-configured httpx client (mostly for tests)
            clock: Callable returning unix time, used for token claims and expiry

        Raises:
            ConfigurationError: If a credential is missing or a value is out of range
        """
        if request_timeout <= 0:
            raise ConfigurationError("request_timeout must be positive.", field='request_timeout')
        if token_renewal_safety_margin < 0:
            raise ConfigurationError(
                "token_renewal_safety_margin must not be negative.",
                field='token_renewal_safety_margin'
            )
        # tokens carry whole-second claims, so a fractional lifetime is truncated
        if int(token_lifetime) <= token_renewal_safety_margin:
            raise ConfigurationError(
                "token_lifetime must exceed token_renewal_safety_margin by at least a second.",
                field='token_lifetime'
            )
        if max_retries < 0:
            raise ConfigurationError("max_retries must not be negative.", field='max_retries')

        self.host = host
        self.credentials = Credentials(app_key, app_secret, user_identifier)

        clock_kwargs = {'clock': clock} if clock is not None else {}
        minter = TokenMinter(self.credentials, signer=signer, **clock_kwargs)
        self.tokens = TokenCache(
            minter,
            lifetime=token_lifetime,
            safety_margin=token_renewal_safety_margin,
            **clock_kwargs
        )
        self.transport = Transport(
            timeout=request_timeout,
            max_retries=max_retries,
            backoff_factor=backoff_factor,
            client=http_client,
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def close(self):
        """Close the underlying HTTP client."""
        await self.transport.close()

    # ── Request pipeline ───────────────────────────────────────────

    async def request(self, descriptor: RequestDescriptor, model: Any = None):
        """Send one authenticated request and decode its response.

        Args:
            descriptor: Method, path (relative to the API root), query and body
            model: Expected response type; ``None`` returns the parsed JSON

        Returns:
            The decoded response

        Raises:
            ConfigurationError: If the token cannot be minted or the body serialized
            TransportError: On connection failure or timeout
            AuthenticationError: On 401/403
            RemoteError, ProtocolError, DecodeError: See ``response.interpret``
        """
        url = build_url(self.host, descriptor.path, descriptor.params, base_path=API_BASE_PATH)
        body = serialize_body(descriptor.body)
        token = self.tokens.get_token()

        headers = {'Authorization': f'Bearer {token.signed_value}'}
        if body is not None:
            headers['Content-Type'] = 'application/json; charset=utf-8'

        response = await self.transport.send(descriptor.method, url, headers, body)
        return interpret(response, model)

    async def request_with_auth_retry(self, descriptor: RequestDescriptor, model: Any = None):
        """Like ``request``, retrying once with a fresh token on authentication failure.

        Tokens minted within the same clock second are identical, so when the
        new token matches the rejected one the original error is raised
        without sending the request again. A second authentication failure
        is raised to the caller.
        """
        try:
            return await self.request(descriptor, model)
        except AuthenticationError as e:
            rejected = self.tokens.current
            self.tokens.invalidate()
            fresh = self.tokens.get_token()
            if rejected is not None and fresh.signed_value == rejected.signed_value:
                logger.info("Authentication failed (%s), no newer token available yet", e.status)
                raise
            logger.info("Authentication failed (%s), retrying with a fresh token", e.status)
        return await self.request(descriptor, model)

    async def get(self, path: str, params: Sequence = (), model: Any = None):
        return await self.request(RequestDescriptor('GET', path, params), model)

    async def post(self, path: str, body: Any = None, params: Sequence = (), model: Any = None):
        return await self.request(RequestDescriptor('POST', path, params, body), model)

    async def put(self, path: str, body: Any = None, params: Sequence = (), model: Any = None):
        return await self.request(RequestDescriptor('PUT', path, params, body), model)

    async def delete(self, path: str, params: Sequence = (), model: Any = None):
        return await self.request(RequestDescriptor('DELETE', path, params), model)

    # ── Read Endpoints ──────────────────────────────────────────────

    async def test_connection(self) -> Optional[str]:
        """Check the credentials.

        Returns:
            Short name of the connected user, or None for an anonymous token
        """
        response = await self.get('test', model=ConnectionTestResponse)
        return response.connected_user

    async def get_profile(self, short_name: str = None, user_id: str = None,
                          get_curated_topics: bool = True,
                          get_followed_topics: bool = False,
                          get_tags: bool = False, get_stats: bool = False) -> User:
        """Get the profile of a user (defaults to the current user).

        Curated posts, suggestions and comments are never requested, to avoid
        retrieving the world while only looking at a profile.
        """
        params = query_params(
            short_name=short_name,
            id=user_id,
            get_stats=get_stats,
            get_tags=get_tags,
            curated=0,
            curable=0,
            ncomments=0,
            get_followed_topics=get_followed_topics,
            get_curated_topics=get_curated_topics,
            get_creator=False,
        )
        response = await self.get('profile', params, model=ProfileResponse)
        return response.user

    async def get_topic(self, topic_id: int = None, url_name: str = None,
                        curated: int = 30, page: int = None,
                        order: TopicOrder = None, tags: list = None,
                        q: str = None, since: int = None, to: int = None,
                        ncomments: int = 100, show_scheduled: bool = False) -> Topic:
        """Get a topic and its curated posts.

        Args:
            topic_id: Topic id, required unless url_name is given
            url_name: Topic url name, required unless topic_id is given
            curated: Number of curated posts to retrieve
            page: Page of curated posts
            order: Sort order; TopicOrder.TAG requires tags, TopicOrder.SEARCH requires q
            tags: Tags to filter posts with
            q: Query to search posts of the topic with
            since: Only posts newer than this timestamp
            to: With since, only posts older than this timestamp
            ncomments: Comments to retrieve for each post
            show_scheduled: Include scheduled posts

        Raises:
            ConfigurationError: If neither topic_id nor url_name is given
        """
        if topic_id is None and not url_name:
            raise ConfigurationError("Either topic_id or url_name is required.", field='topic_id')

        params = query_params(
            id=topic_id,
            url_name=url_name,
            curated=curated,
            page=page,
            curable=0,
            order=order,
            tag=tags,
            q=q,
            since=since,
            to=to,
            ncomments=ncomments,
            show_scheduled=show_scheduled,
        )
        response = await self.get('topic', params, model=TopicResponse)
        return response.topic

    async def search(self, query: str, search_type: SearchType = SearchType.POST,
                     count: int = 50, page: int = None, lang: str = None,
                     topic_id: int = None) -> SearchResults:
        """Search users, topics or posts."""
        params = [('type', search_type)] + query_params(
            query=query,
            count=count,
            page=page,
            lang=lang,
            topic_id=topic_id,
            get_tags=False,
            get_creator=True,
            get_stats=False,
            get_tags_for_topic=False,
            get_stats_for_topic=False,
        )
        return await self.get('search', params, model=SearchResults)

    async def get_compilation(self, sort: CompilationSort = None, topic_ids: list = None,
                              topic_group_id: int = None, since: int = None,
                              count: int = None, page: int = None,
                              ncomments: int = None, get_tags: bool = None,
                              get_tags_for_topic: bool = None,
                              get_stats_for_topic: bool = None) -> list[Post]:
        """Get posts compiled from a set of topics or a topic group.

        Args:
            sort: Post order (CompilationSort.RSS when omitted)
            topic_ids: Topics to compile posts from
            topic_group_id: Compile posts from the topics of this group
            since: No posts older than this timestamp (millis from unix epoch)
            count: Maximum number of posts
            page: Page of posts
            ncomments: Comments to retrieve for each post
            get_tags: Return the tags of each post
            get_tags_for_topic: Return the tags of the topic of each post
            get_stats_for_topic: Return the stats of the topic of each post
        """
        params = query_params(
            sort=sort,
            topic_ids=topic_ids,
            topic_group_id=topic_group_id,
            since=since,
            count=count,
            page=page,
            ncomments=ncomments,
            get_tags=get_tags,
            get_tags_for_topic=get_tags_for_topic,
            get_stats_for_topic=get_stats_for_topic,
        )
        response = await self.get('compilation', params, model=CompilationResponse)
        return response.posts
