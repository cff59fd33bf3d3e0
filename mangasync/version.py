import functools

from setuptools_scm import get_version


@functools.lru_cache(maxsize=None)
def get_mangasync_version():
    from mangasync import get_version as get_fallback_version

    return get_version(fallback_version=get_fallback_version())
