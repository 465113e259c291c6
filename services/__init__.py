"""
服務層

這個 package 包含純計算邏輯與外部協作者，不負責狀態轉換：
- RegionService：區域別名與成本表
- ScarcityService：供需描述
- EventModifierService：Host 事件的需求／成本乘數
- OutcomeService：賣出量、營收、利潤計算
- NewsService：新聞時間軸
- Estimator：LLM 需求估算與新聞生成
"""
