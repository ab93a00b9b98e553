"""
Indication matching: 远程建议不可用时，按诊断文本在本地 catalog 里找药。

算法：诊断转小写；记录的任一 indication 关键词出现在诊断文本里即命中；
每条记录最多命中一次；结果按 popularity 降序（同分保持 catalog 顺序）。
"""

from .matcher import normalize_query
from .ranker import by_popularity


def match_indications(records, diagnosis) -> list:
    text = normalize_query(diagnosis)
    if not text:
        return []

    matches = []
    for record in records:
        tags = getattr(record, "indications", ())
        if any(tag.lower().strip() and tag.lower().strip() in text for tag in tags):
            matches.append(record)
    return by_popularity(matches)
