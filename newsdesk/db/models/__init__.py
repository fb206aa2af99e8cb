from newsdesk.db.models.ai_task import AITask
from newsdesk.db.models.article import Article
from newsdesk.db.models.hot_topic import TRENDING_THRESHOLD, HotTopic
from newsdesk.db.models.image import Image
from newsdesk.db.models.template import Template

__all__ = ["AITask", "Article", "HotTopic", "Image", "Template", "TRENDING_THRESHOLD"]
