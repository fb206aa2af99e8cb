"""Prompt text for content generation."""

from __future__ import annotations

TITLE_SYSTEM_PROMPT = "你是一位专业的标题创作者，擅长创作引人注目、准确且吸引人的标题。"

CONTENT_SYSTEM_PROMPT = (
    "你是一位加密货币和区块链领域的专业内容创作者，擅长撰写有深度、专业且引人入胜的文章。"
)

TEMPLATE_SYSTEM_PROMPT = "你是一位专业的内容创作者，擅长根据模板生成高质量内容。"

EDITOR_SYSTEM_PROMPT = "你是一位严谨的加密货币新闻编辑。"


def get_title_prompt(keywords: list[str], topic: str, style: str) -> str:
    return f"""请基于以下主题和关键词，创建一个吸引人的{style}风格标题：

主题: {topic}
关键词: {", ".join(keywords)}

要求:
1. 标题应该引人注目且吸引读者点击
2. 标题应当准确反映主题内容
3. 标题长度应在15-25个字之间
4. 风格应当是{style}的

请直接返回标题，不要包含其他解释或引号。"""


def get_content_prompt(topic: str, keywords: list[str], style: str) -> str:
    return f"""请根据以下信息撰写一篇关于加密货币的文章：

主题: {topic}
关键词: {", ".join(keywords)}
风格: {style}

要求:
1. 文章应当有明确的结构，包括引言、主体和结论
2. 内容应当深入且专业，适合对加密货币有一定了解的读者
3. 文章长度应在800-1200字之间
4. 使用markdown格式

请直接返回文章内容，不要包含其他解释。"""


def get_summary_prompt(content: str, max_length: int) -> str:
    return f"""请为以下内容提供一个简洁明了的摘要，长度不超过{max_length}个字：

{content}

摘要："""


def get_keywords_prompt(text: str, count: int) -> str:
    return f"""请从以下内容中提取{count}个最重要的关键词:

{text}

以JSON格式返回关键词数组，例如: {{"keywords": ["关键词1", "关键词2"]}}
只返回JSON。"""


def get_template_prompt(rendered_template: str) -> str:
    return f"""请根据以下模板生成内容。模板中的变量已经被替换为相应的值。
请保持原始格式，并确保内容完整、连贯。

模板内容:
{rendered_template}

请直接返回生成的内容，不要包含其他解释。"""
