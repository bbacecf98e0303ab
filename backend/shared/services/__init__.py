"""
Shared services module

직접 경로 임포트 사용 원칙
- 필요한 서비스만 로드 (openpyxl 등 선택 의존성은 실제 사용 시점에 로드)
- 의존성 명확성: 각 모듈이 실제 사용하는 서비스만 임포트

사용법:
❌ from shared.services import SheetGridParser
✅ from shared.services.sheet_grid_parser import SheetGridParser
"""

# __init__.py를 의도적으로 비워두어 불필요한 bulk import 방지
# 각 서비스는 직접 경로로 임포트하세요.

__all__ = []  # 직접 경로 임포트 강제
