"""Seed rows for the in-memory database.

This module is the only source of fixture data: mock mode seeds from it and
tests that want realistic rows import it.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Any, Final

from newsdesk.core.status import AITaskStatus, AITaskType, ArticleStatus

TEMPLATE_MARKET_DAILY_ID: Final[uuid.UUID] = uuid.UUID("6f1c5a1e-3b0d-4d8e-9a57-1b2c3d4e5f60")
TEMPLATE_PROJECT_REVIEW_ID: Final[uuid.UUID] = uuid.UUID("8a2d6b2f-4c1e-4e9f-8b68-2c3d4e5f6071")

HOT_TOPIC_BITCOIN_ETF_ID: Final[uuid.UUID] = uuid.UUID("1b3e7c3a-5d2f-4fa0-9c79-3d4e5f607182")
HOT_TOPIC_ETH_UPGRADE_ID: Final[uuid.UUID] = uuid.UUID("2c4f8d4b-6e3a-40b1-8d8a-4e5f60718293")
HOT_TOPIC_DEFI_ID: Final[uuid.UUID] = uuid.UUID("3d509e5c-7f4b-41c2-9e9b-5f60718293a4")

ARTICLE_ETF_ID: Final[uuid.UUID] = uuid.UUID("4e61af6d-805c-42d3-8fac-60718293a4b5")
ARTICLE_ETH_ID: Final[uuid.UUID] = uuid.UUID("5f72b07e-916d-43e4-90bd-718293a4b5c6")
ARTICLE_DEFI_ID: Final[uuid.UUID] = uuid.UUID("60830c8f-a27e-44f5-a1ce-8293a4b5c6d7")

AI_TASK_SUMMARY_ID: Final[uuid.UUID] = uuid.UUID("71941d90-b38f-4506-b2df-93a4b5c6d7e8")


def _at(day: int, hour: int = 9) -> datetime:
    return datetime(2024, 3, day, hour, 0, tzinfo=UTC)


TEMPLATES: Final[list[dict[str, Any]]] = [
    {
        "id": TEMPLATE_MARKET_DAILY_ID,
        "name": "每日行情快讯",
        "description": "Daily market recap for a single coin",
        "category": "行情分析",
        "content": "今日{coin}价格为{price}，24小时涨跌幅{change}。关注要点：{highlights}",
        "usage_count": 12,
        "created_at": _at(1),
        "updated_at": _at(1),
    },
    {
        "id": TEMPLATE_PROJECT_REVIEW_ID,
        "name": "项目深度解读",
        "description": "Long-form review of a blockchain project",
        "category": "项目研究",
        "content": "{project}是一个{sector}项目，核心团队来自{team}。本文从技术、代币经济和生态三个角度进行分析。",
        "usage_count": 3,
        "created_at": _at(2),
        "updated_at": _at(2),
    },
]

HOT_TOPICS: Final[list[dict[str, Any]]] = [
    {
        "id": HOT_TOPIC_BITCOIN_ETF_ID,
        "keyword": "比特币ETF",
        "volume": 25800,
        "source": "Google Trends",
        "related_articles": [str(ARTICLE_ETF_ID)],
        "created_at": _at(3),
        "updated_at": _at(3),
    },
    {
        "id": HOT_TOPIC_ETH_UPGRADE_ID,
        "keyword": "以太坊坎昆升级",
        "volume": 12400,
        "source": "Twitter",
        "related_articles": [str(ARTICLE_ETH_ID)],
        "created_at": _at(4),
        "updated_at": _at(4),
    },
    {
        "id": HOT_TOPIC_DEFI_ID,
        "keyword": "DeFi收益",
        "volume": 4300,
        "source": "Weibo",
        "related_articles": [],
        "created_at": _at(5),
        "updated_at": _at(5),
    },
]

ARTICLES: Final[list[dict[str, Any]]] = [
    {
        "id": ARTICLE_ETF_ID,
        "title": "比特币现货ETF持续净流入，机构配置意愿增强",
        "summary": "多只比特币现货ETF连续多日录得净流入。",
        "content": "<p>多只比特币现货ETF连续多日录得净流入，机构投资者的配置需求正在上升。</p>",
        "cover_image": "https://images.example.com/btc-etf.jpg",
        "category": "比特币",
        "keywords": ["比特币", "ETF", "机构"],
        "status": ArticleStatus.PUBLISHED.value,
        "author": "编辑部",
        "source": "newsroom",
        "template_id": TEMPLATE_MARKET_DAILY_ID,
        "hot_topic_id": HOT_TOPIC_BITCOIN_ETF_ID,
        "created_at": _at(6),
        "updated_at": _at(6, 12),
        "published_at": _at(6, 12),
    },
    {
        "id": ARTICLE_ETH_ID,
        "title": "以太坊坎昆升级上线，Layer2手续费大幅下降",
        "summary": "坎昆升级引入Blob交易，二层网络成本显著降低。",
        "content": "<p>坎昆升级引入了EIP-4844，Layer2网络的数据发布成本大幅下降。</p>",
        "cover_image": "https://images.example.com/eth-dencun.jpg",
        "category": "以太坊",
        "keywords": ["以太坊", "坎昆升级", "Layer2"],
        "status": ArticleStatus.PENDING.value,
        "author": "AI助手",
        "source": "Dify AI",
        "template_id": TEMPLATE_PROJECT_REVIEW_ID,
        "hot_topic_id": HOT_TOPIC_ETH_UPGRADE_ID,
        "created_at": _at(7),
        "updated_at": _at(7),
        "published_at": None,
    },
    {
        "id": ARTICLE_DEFI_ID,
        "title": "DeFi收益率回升背后的风险",
        "summary": "收益率回升的同时，协议风险同样值得关注。",
        "content": "<p>随着链上活跃度回升，多个DeFi协议的收益率出现反弹。</p>",
        "cover_image": None,
        "category": "去中心化金融",
        "keywords": ["DeFi", "收益"],
        "status": ArticleStatus.DRAFT.value,
        "author": "编辑部",
        "source": "newsroom",
        "template_id": None,
        "hot_topic_id": HOT_TOPIC_DEFI_ID,
        "created_at": _at(8),
        "updated_at": _at(8),
        "published_at": None,
    },
]

AI_TASKS: Final[list[dict[str, Any]]] = [
    {
        "id": AI_TASK_SUMMARY_ID,
        "name": "生成ETF文章摘要",
        "type": AITaskType.SUMMARY.value,
        "status": AITaskStatus.COMPLETED.value,
        "input_data": {"article_id": str(ARTICLE_ETF_ID), "maxLength": 150},
        "result_data": {"summary": "多只比特币现货ETF连续多日录得净流入。"},
        "error_message": None,
        "article_id": ARTICLE_ETF_ID,
        "created_at": _at(6, 10),
        "completed_at": _at(6, 11),
    },
]
