"""Configuration schema using Pydantic."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class Base(BaseModel):
    """Base model accepting both camelCase and snake_case keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SearchConfig(Base):
    """Search engine endpoint and result count limits."""

    origin: str = "https://cn.bing.com"
    search_url: str = "https://cn.bing.com/search?q={query}&setlang=zh-CN&ensearch=0"
    site_domain: str = "bing.com"
    default_results: int = 5
    max_results: int = 20
    transport: Literal["browser", "http"] = "browser"


class ResultStoreConfig(Base):
    """Lifetime and capacity of stored results."""

    ttl_s: int = 60 * 60
    max_results: int = 1000
    cleanup_interval_s: int = 30 * 60
    cleanup_enabled: bool = True


class HttpConfig(Base):
    """Plain HTTP transport settings."""

    user_agent: str = DEFAULT_USER_AGENT
    accept_language: str = "zh-CN,zh;q=0.9,en;q=0.8"
    timeout_s: float = 15.0


class BrowserConfig(Base):
    """Playwright transport settings."""

    default_browser: Literal["chromium", "firefox"] = "chromium"
    headless: bool = True
    timeout_ms: int = 30000
    locale: str = "zh-CN"
    user_agent: str = DEFAULT_USER_AGENT
    wait_selector: str = "#b_results, .b_algo, #b_content"
    auto_install_browsers: bool = True
    allow_private_network: bool = False
    block_file_scheme: bool = True


class ContentConfig(Base):
    """Page content extraction limits."""

    max_chars: int = 8000


class Config(Base):
    """Root configuration for serpbot."""

    search: SearchConfig = Field(default_factory=SearchConfig)
    store: ResultStoreConfig = Field(default_factory=ResultStoreConfig)
    http: HttpConfig = Field(default_factory=HttpConfig)
    browser: BrowserConfig = Field(default_factory=BrowserConfig)
    content: ContentConfig = Field(default_factory=ContentConfig)
