"""
App layer: 대시보드 서버 (FastAPI + Jinja2).

역할:
- 섹션/레코드 페이지, multipart 폼 처리, artifact 서빙
- ⚠️ 수집/저장 로직 없음 (core에 위임)
"""
