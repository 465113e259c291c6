"""
稀缺度服務：依上一回合的賣出比例給出供需描述

只作為 Estimator 的背景資訊，不參與確定性的數值計算
"""
from models import Scarcity

SCARCE_RATIO = 0.9
OVERSUPPLIED_RATIO = 0.4


def classify_scarcity(units_produced, units_sold) -> Scarcity:
    """
    依生產量與賣出量判斷供需狀況

    規則：
    - 生產量 <= 0: UNAVAILABLE
    - 賣出比例 > 0.9: SCARCE
    - 賣出比例 < 0.4: OVERSUPPLIED
    - 其他: BALANCED（0.9 與 0.4 本身都算 BALANCED）

    範例：
        classify_scarcity(0, 10) -> Scarcity.UNAVAILABLE
        classify_scarcity(100, 95) -> Scarcity.SCARCE
        classify_scarcity(100, 90) -> Scarcity.BALANCED
        classify_scarcity(100, 10) -> Scarcity.OVERSUPPLIED
    """
    if not units_produced or units_produced <= 0:
        return Scarcity.UNAVAILABLE

    ratio = units_sold / units_produced

    if ratio > SCARCE_RATIO:
        return Scarcity.SCARCE
    if ratio < OVERSUPPLIED_RATIO:
        return Scarcity.OVERSUPPLIED
    return Scarcity.BALANCED
