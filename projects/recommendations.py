"""Skill-based recommendation engine.

Scores are Jaccard similarities over case-insensitive, trimmed skill names.
Company recommendations blend skill match (70%) with the company rating (30%).
"""

from __future__ import annotations

from accounts.models import CompanyProfile

from .models import Project


def _skill_set(skills) -> set[str]:
    return {str(s).strip().lower() for s in (skills or []) if str(s).strip()}


def jaccard_similarity(skills1, skills2) -> float:
    a = _skill_set(skills1)
    b = _skill_set(skills2)
    if not a or not b:
        return 0.0
    return len(a & b) / len(a | b)


def recommended_projects_for_company(company_id, limit: int = 5) -> list[dict]:
    company = CompanyProfile.objects.filter(pk=company_id).first()
    if not company:
        return []

    scored = [
        {'project': project, 'matchScore': jaccard_similarity(company.skills, project.skills)}
        for project in Project.objects.select_related('owner')
    ]
    scored.sort(key=lambda item: item['matchScore'], reverse=True)
    return scored[:limit]


def recommended_companies_for_project(project_id, limit: int = 5) -> list[dict]:
    project = Project.objects.filter(pk=project_id).first()
    if not project:
        return []

    scored = []
    for company in CompanyProfile.objects.select_related('user'):
        skill_score = jaccard_similarity(project.skills, company.skills)
        rating_factor = (company.rating or 0) / 5
        scored.append({'company': company, 'matchScore': skill_score * 0.7 + rating_factor * 0.3})
    scored.sort(key=lambda item: item['matchScore'], reverse=True)
    return scored[:limit]


def similar_projects(project_id, limit: int = 3) -> list[dict]:
    project = Project.objects.filter(pk=project_id).first()
    if not project:
        return []

    scored = [
        {'project': other, 'similarityScore': jaccard_similarity(project.skills, other.skills)}
        for other in Project.objects.exclude(pk=project.pk).select_related('owner')
    ]
    scored.sort(key=lambda item: item['similarityScore'], reverse=True)
    return scored[:limit]


def trending_projects(limit: int = 5) -> list[Project]:
    # 1. عالي الطلب ثم 2. جديد ثم 3. أي مشاريع أخرى
    projects = list(Project.objects.select_related('owner'))
    trending = [p for p in projects if p.highlight_status == Project.HIGHLIGHT_HIGH_DEMAND]

    if len(trending) < limit:
        fresh = [p for p in projects if p.highlight_status == Project.HIGHLIGHT_NEW]
        trending.extend(fresh[:limit - len(trending)])

    if len(trending) < limit:
        chosen = {p.pk for p in trending}
        others = [p for p in projects if p.pk not in chosen]
        trending.extend(others[:limit - len(trending)])

    return trending[:limit]
