"""
核心業務邏輯層

這個 package 包含所有核心業務邏輯，包括：
- 狀態機：集中管理所有 Lobby 狀態轉換
- Manager：管理 Lobby、公司提交與回合結算的生命週期
- Lobby Store：常駐記憶體的 Lobby 註冊表
- Locks：並發控制工具
"""
