"""
行銷統計資料：程序啟動時讀取一次 marketing_stats.csv

檔案不存在不是錯誤，退回內建的預設值（沒有額外統計，prompt 只使用內建的參考表）
"""
import csv
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class MarketingStats:
    rows: List[Dict[str, str]] = field(default_factory=list)
    source: Optional[str] = None

    def format_for_prompt(self) -> str:
        """把 CSV 轉回分號分隔的表格，直接放進 prompt"""
        if not self.rows:
            return "No additional marketing statistics available."

        columns = list(self.rows[0].keys())
        lines = [";".join(columns)]
        for row in self.rows:
            lines.append(";".join((row.get(column) or "").strip() for column in columns))
        return "\n".join(lines)


def load_marketing_stats(path: str) -> MarketingStats:
    """
    讀取行銷統計 CSV（第一列為欄位名稱）

    參數：
        path: CSV 路徑

    返回：
        MarketingStats；檔案不存在時回傳預設值
    """
    try:
        with open(path, newline="", encoding="utf-8") as f:
            rows = [
                row for row in csv.DictReader(f)
                if any(isinstance(value, str) and value.strip() for value in row.values())
            ]
    except FileNotFoundError:
        logger.warning(f"{path} not found, using default marketing values")
        return MarketingStats()

    logger.info(f"Marketing data loaded: {len(rows)} rows from {path}")
    return MarketingStats(rows=rows, source=path)
