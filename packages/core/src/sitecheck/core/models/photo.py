"""Photo Domain Model

照片由若干按类型标记的 URI 变体组成（thumbnail / web / original），
旧格式只有单个 url 字段。
"""

from typing import Any

import structlog
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from .enums import PHOTO_URI_FALLBACKS, PhotoUriType

log = structlog.get_logger()


def loose_id(value: Any) -> Any:
    """宽松 ID：整数值的 float 转为 int，其他非 str / int 值转为字符串"""
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, int):
        return value
    return str(value)


class PhotoUri(BaseModel):
    """单个 URI 变体，兼容 url / uri 两种字段名"""

    model_config = ConfigDict(frozen=True)

    type: str = Field(default="", description="URI 类型：thumbnail / web / original")
    url: str | None = Field(default=None, description="资源地址")

    @model_validator(mode="before")
    @classmethod
    def _accept_uri_alias(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = {**data, "type": data.get("type") or ""}
        if not data.get("url") and data.get("uri"):
            data["url"] = data["uri"]
        return data


class Photo(BaseModel):
    """Photo 数据模型"""

    model_config = ConfigDict(frozen=True)

    id: str | int | None = Field(default=None, description="照片 ID")
    uris: list[PhotoUri] | None = Field(default=None, description="URI 变体列表")
    url: str | None = Field(default=None, description="旧格式单一地址")

    @field_validator("id", mode="before")
    @classmethod
    def _loose_id(cls, value: Any) -> Any:
        return loose_id(value)

    def get_url(self, kind: PhotoUriType | str = PhotoUriType.WEB) -> str | None:
        """按类型解析照片地址

        行为规则:
            1. 没有 uris 但有 url -> 返回旧格式 url
            2. 请求类型存在 -> 直接返回
            3. 否则按 PHOTO_URI_FALLBACKS 顺序降级
            4. 都没有 -> None
        """
        if self.uris is None:
            return self.url

        try:
            order = PHOTO_URI_FALLBACKS[PhotoUriType(kind)]
        except ValueError:
            order = PHOTO_URI_FALLBACKS[PhotoUriType.WEB]

        for uri_type in (str(kind), *order):
            for uri in self.uris:
                if uri.type == uri_type and uri.url:
                    return uri.url
        return None


def parse_photos(raw: Any) -> list[Photo]:
    """宽松解析照片列表，跳过无法识别的条目

    Args:
        raw: list 或 {"data": [...]} 形式的原始数据

    Returns:
        Photo 列表（无法解析时为空列表）
    """
    if isinstance(raw, dict):
        raw = raw.get("data")
    if not isinstance(raw, list):
        return []

    photos: list[Photo] = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        uris = item.get("uris")
        try:
            photos.append(
                Photo(
                    id=item.get("id"),
                    uris=_parse_uris(uris) if uris is not None else None,
                    url=item.get("url") if isinstance(item.get("url"), str) else None,
                )
            )
        except ValidationError as e:
            log.debug("photo_entry_skipped", photo_id=item.get("id"), error=str(e))
    return photos


def _parse_uris(raw: Any) -> list[PhotoUri]:
    """逐条校验 URI 变体，无法解析的条目单独跳过"""
    uris: list[PhotoUri] = []
    if not isinstance(raw, list):
        return uris
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        try:
            uris.append(PhotoUri.model_validate(entry))
        except ValidationError as e:
            log.debug("photo_uri_skipped", uri_type=entry.get("type"), error=str(e))
    return uris
