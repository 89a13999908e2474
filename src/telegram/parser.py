"""HTML parsing of the Telegram channel preview (``t.me/s/<channel>``).

The preview markup is not a documented interface; selectors follow the
current ``tgme_*`` class names.
"""

import re
from datetime import UTC, datetime
from urllib.parse import urlparse

from bs4 import BeautifulSoup, Tag

from .models import ChannelInfo, LinkPreview, MediaFile, Reply, TelegramPost


BACKGROUND_URL = re.compile(r"url\(['\"](.*?)['\"]", re.IGNORECASE)

UNSUPPORTED_MEDIA_HTML = (
    '<div class="unsupported-media-notice">'
    "<span>媒体文件过大，无法预览。</span>"
    '<a href="{link}" target="_blank" rel="noopener noreferrer">在 Telegram 中查看</a>'
    "</div>"
)


# ==============================================================================
# Relative dates
# ==============================================================================


def format_relative_time(moment: datetime, now: datetime | None = None) -> str:
    """Describe ``moment`` relative to ``now`` in Simplified Chinese.

    Thresholds: seconds under 45s, minutes under 45m, hours under 22h,
    days under 26d, months under 11 months, then years.
    """
    now = now or datetime.now(UTC)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    seconds = (now - moment).total_seconds()
    suffix = "前" if seconds >= 0 else "后"
    seconds = abs(seconds)

    minutes = seconds / 60
    hours = minutes / 60
    days = hours / 24
    months = days / 30.4375
    years = days / 365.25

    if seconds < 45:
        phrase = "几秒"
    elif seconds < 90:
        phrase = "1 分钟"
    elif minutes < 45:
        phrase = f"{round(minutes)} 分钟"
    elif minutes < 90:
        phrase = "1 小时"
    elif hours < 22:
        phrase = f"{round(hours)} 小时"
    elif hours < 36:
        phrase = "1 天"
    elif days < 26:
        phrase = f"{round(days)} 天"
    elif days < 46:
        phrase = "1 个月"
    elif months < 11:
        phrase = f"{round(months)} 个月"
    elif months < 18:
        phrase = "1 年"
    else:
        phrase = f"{round(years)} 年"

    return f"{phrase}{suffix}"


# ==============================================================================
# Post parts
# ==============================================================================


def _background_url(element: Tag | None) -> str | None:
    if element is None:
        return None
    match = BACKGROUND_URL.search(element.get("style", ""))
    return match.group(1) if match else None


def _parse_media(item: Tag) -> list[MediaFile]:
    media: list[MediaFile] = []
    for photo in item.select(".tgme_widget_message_photo_wrap"):
        url = _background_url(photo)
        if url:
            media.append(MediaFile(type="image", url=url))
    for video in item.select(".tgme_widget_message_video_wrap video"):
        url = video.get("src")
        if url:
            media.append(MediaFile(type="video", url=url, thumbnail=video.get("poster") or None))
    return media


def _parse_link_preview(item: Tag) -> LinkPreview | None:
    link = item.select_one(".tgme_widget_message_link_preview")
    if link is None or not link.get("href"):
        return None

    url = link["href"]
    hostname = urlparse(url).hostname
    if not hostname:
        return None

    title = link.select_one(".link_preview_title") or link.select_one(
        ".link_preview_site_name"
    )
    description = link.select_one(".link_preview_description")
    return LinkPreview(
        url=url,
        hostname=hostname,
        title=title.get_text() if title else "",
        description=description.get_text() if description else "",
        image=_background_url(link.select_one(".link_preview_image")),
    )


def _parse_reply(item: Tag) -> Reply | None:
    reply = item.select_one(".tgme_widget_message_reply")
    if reply is None or not reply.get("href"):
        return None

    reply_id = reply["href"].rstrip("/").split("/")[-1]
    author_el = reply.select_one(".tgme_widget_message_author_name")
    author = author_el.get_text() if author_el else ""
    author = author or "未知用户"

    text = reply.get_text().replace(author, "", 1).strip()
    if not text:
        if reply.select_one(".tgme_widget_message_photo"):
            text = "[图片]"
        elif reply.select_one(".tgme_widget_message_sticker"):
            text = "[贴纸]"
        elif reply.select_one(".tgme_widget_message_video"):
            text = "[视频]"
        else:
            text = "..."

    return Reply(url=f"/post/{reply_id}", author=author, text=text)


def _render_text(item: Tag) -> str:
    """Inner HTML of the message text with styled links and no media."""
    text = item.select_one(".tgme_widget_message_text")
    if text is None:
        return ""

    text = BeautifulSoup(str(text), "html.parser").select_one(
        ".tgme_widget_message_text"
    )
    for link in text.find_all("a"):
        classes = ["hashtag"] if link.get_text().startswith("#") else ["link", "link-primary"]
        link["class"] = [*link.get("class", []), *classes]
    for wrap in text.select(
        ".tgme_widget_message_photo_wrap, .tgme_widget_message_video_wrap"
    ):
        wrap.decompose()

    return text.decode_contents()


def parse_post(
    item: Tag,
    channel: str,
    now: datetime | None = None,
) -> TelegramPost:
    """Parse one ``.tgme_widget_message`` element."""
    post_id = (item.get("data-post") or "").replace(f"{channel}/", "") or "0"
    post_link = f"https://t.me/{channel}/{post_id}"

    time_el = item.select_one(".tgme_widget_message_date time")
    stamp = time_el.get("datetime", "") if time_el else ""
    formatted = (
        format_relative_time(datetime.fromisoformat(stamp), now) if stamp else "未知时间"
    )

    html_content = _render_text(item)
    if item.select_one(".message_media_not_supported_wrap"):
        html_content += UNSUPPORTED_MEDIA_HTML.format(link=post_link)

    text_el = item.select_one(".tgme_widget_message_text")
    views_el = item.select_one(".tgme_widget_message_views")

    return TelegramPost(
        id=post_id,
        datetime=stamp,
        formatted_date=formatted,
        text=text_el.get_text() if text_el else "",
        html_content=html_content,
        views=(views_el.get_text() if views_el else "") or "0",
        media=_parse_media(item),
        link_preview=_parse_link_preview(item),
        reply=_parse_reply(item),
    )


# ==============================================================================
# Pages
# ==============================================================================


def _counter(soup: BeautifulSoup, index: int) -> int | None:
    counters = soup.select(".tgme_channel_info_counter .counter_value")
    if index >= len(counters):
        return None
    # Leading digits only, so "1.2K" reads as 1
    match = re.match(r"\d+", re.sub(r"\s", "", counters[index].get_text()))
    return (int(match.group()) or None) if match else None


def parse_channel(html: str, channel: str, now: datetime | None = None) -> ChannelInfo:
    """Parse a channel preview page; posts are returned newest first."""
    soup = BeautifulSoup(html, "html.parser")

    posts = []
    for wrap in soup.select(".tgme_channel_history .tgme_widget_message_wrap"):
        item = wrap.select_one(".tgme_widget_message")
        if item is not None:
            posts.append(parse_post(item, channel, now))
    posts.reverse()

    title = soup.select_one(".tgme_channel_info_header_title")
    description = soup.select_one(".tgme_channel_info_description")
    avatar = soup.select_one(".tgme_page_photo_image img")

    return ChannelInfo(
        title=(title.get_text() if title else "") or "Telegram Channel",
        description=description.get_text() if description else "",
        avatar=(avatar.get("src") if avatar else "") or "",
        subscribers=_counter(soup, 0),
        photos=_counter(soup, 1),
        posts=posts,
    )


def parse_single_post(
    html: str,
    channel: str,
    now: datetime | None = None,
) -> TelegramPost | None:
    """Parse an embedded single-post page."""
    soup = BeautifulSoup(html, "html.parser")
    item = soup.select_one(".tgme_widget_message")
    return parse_post(item, channel, now) if item is not None else None
