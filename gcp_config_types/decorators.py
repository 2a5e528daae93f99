"""Decorators injecting resolved secrets into functions."""
import functools

from gcp_config_types.secret import GenericSecret, UsernamePasswordSecret


class InjectSecret:
    """Decorator injecting a resolved secret as the first argument"""

    def __init__(self, secret_uri, encoding="UTF-8", resolver=None, timeout=None):
        """
        Constructs a decorator to inject a single non-keyworded argument from a secret for a given function.

        :type secret_uri: str
        :param secret_uri: The protocol tagged secret, e.g. env://API_KEY

        :type encoding: string
        :param encoding: Character encoding of the secret, if None the raw bytes are passed

        :type resolver: gcp_config_types.SecretResolver
        :param resolver: Resolver to use, defaults to the process wide resolver

        :type timeout: float
        :param timeout: Seconds allowed for any secret store lookup
        """

        self.secret_uri = secret_uri
        self.encoding = encoding
        self.resolver = resolver
        self.timeout = timeout

    def __call__(self, func):
        """
        Return a function with the secret injected as first argument.

        :type func: object
        :param func: The function for injecting a single non-keyworded argument too.
        :return The function with the injected argument.
        """
        secret = GenericSecret.parse(self.secret_uri, resolver=self.resolver, timeout=self.timeout).data
        if self.encoding:
            secret = secret.decode(self.encoding)

        @functools.wraps(func)
        def _wrapped_func(*args, **kwargs):
            """
            Internal function to execute wrapped function
            """
            return func(secret, *args, **kwargs)

        return _wrapped_func


class InjectCredentials:
    """Decorator injecting a username and password as keyword arguments"""

    def __init__(self, secret_uri, username="username", password="password", resolver=None,
                 timeout=None):
        """
        Construct a decorator to inject the username and password of a credential secret.

        :type secret_uri: str
        :param secret_uri: The protocol tagged credentials, e.g. file:///etc/app/db.json

        :type username: str
        :param username: keyword argument of the wrapped function receiving the username

        :type password: str
        :param password: keyword argument of the wrapped function receiving the password

        :type resolver: SecretResolver
        :param resolver: Resolver to use, defaults to the process wide resolver

        :type timeout: float
        :param timeout: Seconds allowed for any secret store lookup
        """

        self.secret_uri = secret_uri
        self.username = username
        self.password = password
        self.resolver = resolver
        self.timeout = timeout

    def __call__(self, func):
        """
        Return a function with injected keyword arguments from the credentials.

        :type func: object
        :param func: function for injecting keyword arguments.
        :return The original function with injected keyword arguments
        """
        creds = UsernamePasswordSecret.parse(self.secret_uri, resolver=self.resolver,
                                             timeout=self.timeout)
        resolved_kwargs = {self.username: creds.username, self.password: creds.password}

        @functools.wraps(func)
        def _wrapped_func(*args, **kwargs):
            """
            Internal function to execute wrapped function
            """
            return func(*args, **resolved_kwargs, **kwargs)

        return _wrapped_func
