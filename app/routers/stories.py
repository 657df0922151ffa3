"""
Speech Collector — Stories Router

Read access to imported stories and a segmentation preview.
"""

from fastapi import APIRouter, Form, HTTPException, status
from loguru import logger

from app import storage
from app.schemas import SegmentResponse, SentenceOut, StoryOut, StorySentencesResponse
from app.text_pipeline import parse_story, segment

router = APIRouter(prefix="/api/stories", tags=["Stories"])


@router.get("", response_model=list[StoryOut], summary="List stories")
def list_stories() -> list[StoryOut]:
    return [StoryOut(**row) for row in storage.list_stories()]


@router.get(
    "/{story_id}/sentences",
    response_model=StorySentencesResponse,
    summary="Sentences of a story, in reading order",
)
def story_sentences(story_id: int) -> StorySentencesResponse:
    sentences = storage.get_story_sentences(story_id)
    if sentences is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No story with id {story_id}.",
        )
    return StorySentencesResponse(
        story_id=story_id,
        total_sentences=len(sentences),
        sentences=[SentenceOut(**s) for s in sentences],
    )


@router.post(
    "/segment",
    response_model=SegmentResponse,
    summary="Preview sentence segmentation",
    description=(
        "Split submitted text into the numbered sentences the importer would "
        "store. With `has_title` the first non-blank line is treated as the "
        "story title and excluded from segmentation."
    ),
)
def segment_preview(
    text: str = Form(..., description="Story text (Devanagari, one or more lines)."),
    has_title: bool = Form(default=False),
) -> SegmentResponse:
    title = None
    body = text
    if has_title:
        story = parse_story(text)
        if story is not None:
            title, body = story.title, story.body

    sentences = segment(body)
    logger.info(f"[StoriesRouter] Segment preview: {len(text)} chars → {len(sentences)} sentences")
    if not sentences:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="No sentences found. The text contains no letters to record.",
        )

    return SegmentResponse(
        title=title,
        total_sentences=len(sentences),
        sentences=[
            SentenceOut(order_in_story=i, text=s)
            for i, s in enumerate(sentences, start=1)
        ],
    )
