from functools import wraps
from django.conf import settings
from django.http import JsonResponse
from django_ratelimit.decorators import ratelimit
from django_ratelimit.exceptions import Ratelimited


def conditional_ratelimit(key, rate, method, block=True):
    """Apply rate limiting only if RATELIMIT_ENABLE is True"""
    def decorator(func):
        if not getattr(settings, 'RATELIMIT_ENABLE', True):
            return func
        limited = ratelimit(key=key, rate=rate, method=method, block=block)(func)

        @wraps(func)
        def wrapper(request, *args, **kwargs):
            try:
                return limited(request, *args, **kwargs)
            except Ratelimited:
                return JsonResponse({'error': 'Too many requests'}, status=429)
        return wrapper
    return decorator


# Predefined rate limit decorators for different endpoint types
rate_limit_ocr = conditional_ratelimit(key='ip', rate='10/h', method='POST')
rate_limit_edit = conditional_ratelimit(key='ip', rate='60/m', method='POST')
