"""从 User-Agent 推断设备信息

Review note:
- 关键字子串匹配，仅区分设备类型、浏览器和操作系统，不解析版本，也不识别爬虫。
- 调用方只依赖 UserAgentParser 接口，可替换为专门的解析库。
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol, Sequence, Tuple


@dataclass(frozen=True)
class ParsedDevice:
    type: str
    browser: str
    os: str


class UserAgentParser(Protocol):
    def parse(self, user_agent: str) -> ParsedDevice:
        ...


# (标签, 关键字) 按顺序匹配，先命中者生效
_DEVICE_RULES: Sequence[Tuple[str, Tuple[str, ...]]] = (
    ("tablet", ("ipad", "tablet")),
    ("mobile", ("mobile", "iphone")),
)

_BROWSER_RULES: Sequence[Tuple[str, Tuple[str, ...]]] = (
    ("Edge", ("edg/", "edge")),
    ("Chrome", ("chrome", "crios")),
    ("Firefox", ("firefox", "fxios")),
    ("Safari", ("safari",)),
)

_OS_RULES: Sequence[Tuple[str, Tuple[str, ...]]] = (
    ("Windows", ("windows",)),
    ("iOS", ("iphone", "ipad", "ipod", "ios")),
    ("Android", ("android",)),
    ("macOS", ("mac",)),
    ("Linux", ("linux",)),
)


def _match(ua: str, rules, fallback: str) -> str:
    for label, keywords in rules:
        if any(keyword in ua for keyword in keywords):
            return label
    return fallback


class KeywordUserAgentParser:
    """基于关键字的 User-Agent 解析"""

    def parse(self, user_agent: str) -> ParsedDevice:
        ua = (user_agent or "").lower()
        return ParsedDevice(
            type=_match(ua, _DEVICE_RULES, "desktop"),
            browser=_match(ua, _BROWSER_RULES, "Other"),
            os=_match(ua, _OS_RULES, "Other"),
        )


default_parser = KeywordUserAgentParser()


def detect_device(
    user_agent: Optional[str],
    parser: Optional[UserAgentParser] = None,
) -> Optional[ParsedDevice]:
    """user_agent 为空时返回 None，调用方保留默认设备信息"""
    if not user_agent:
        return None
    return (parser or default_parser).parse(user_agent)
