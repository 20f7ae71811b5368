from __future__ import annotations

import random

from .models import Topic


DEFAULT_TOPICS_KO: dict[str, list[str]] = {
    "음식": ["피자", "라면", "초밥", "떡볶이", "치킨", "삼겹살", "김치찌개", "파스타", "햄버거", "카레"],
    "동물": ["강아지", "고양이", "토끼", "호랑이", "코끼리", "기린", "펭귄", "원숭이", "독수리", "돌고래"],
    "직업": ["의사", "선생님", "요리사", "소방관", "경찰관", "파일럿", "디자이너", "유튜버", "변호사", "가수"],
    "장소": ["놀이공원", "도서관", "수영장", "카페", "영화관", "병원", "학교", "마트", "공원", "헬스장"],
    "스포츠": ["축구", "농구", "야구", "테니스", "수영", "복싱", "배구", "골프", "탁구", "스키"],
}


def pick_topic(topics: dict[str, list[str]] | None = None, rng: random.Random | None = None) -> Topic:
    """Uniform category first, then a uniform word inside it."""
    topics = topics or DEFAULT_TOPICS_KO
    r = rng or random
    category = r.choice(sorted(topics))
    word = r.choice(topics[category])
    return Topic(category=category, word=word)
