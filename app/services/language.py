"""语言标签处理"""
from typing import Optional

GLOBAL_LANGUAGE = "global"
ALL_LANGUAGES = "all"


def normalize(tag: Optional[str]) -> str:
    """去除空白并转小写, 空值归入 global"""
    if tag is None:
        return GLOBAL_LANGUAGE
    tag = tag.strip().lower()
    return tag or GLOBAL_LANGUAGE


def storage_language(tag: Optional[str]) -> str:
    """存储用的语言标签, 通配符 all 不会被存储"""
    language = normalize(tag)
    if language == ALL_LANGUAGES:
        return GLOBAL_LANGUAGE
    return language


def language_filter(tag: Optional[str]) -> Optional[str]:
    """查询用的语言过滤, ``None`` 表示不限语言"""
    if tag is None:
        return None
    language = normalize(tag)
    if language == ALL_LANGUAGES:
        return None
    return language
