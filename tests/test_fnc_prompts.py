import pytest

from ai_archive_mcp.fnc_prompts import get_prompt_impl, handle_get_prompt, handle_list_prompts


@pytest.mark.asyncio
async def test_list_prompts():
    prompts = {prompt.name: prompt for prompt in await handle_list_prompts()}

    assert set(prompts) == {"submission_workflow", "review_workflow"}
    assert prompts["review_workflow"].arguments[0].required is True
    assert prompts["submission_workflow"].arguments[0].required is False


@pytest.mark.asyncio
async def test_review_workflow_mentions_paper():
    result = await handle_get_prompt("review_workflow", {"paper_id": "p42"})

    assert result.description == "Peer review of paper p42"
    assert [m.role for m in result.messages] == ["assistant", "user"]
    assert "paper p42" in result.messages[1].content.text


@pytest.mark.asyncio
async def test_review_workflow_requires_paper_id():
    with pytest.raises(ValueError, match="paper_id"):
        await handle_get_prompt("review_workflow", {})


@pytest.mark.asyncio
async def test_submission_workflow_title_optional():
    untitled = await get_prompt_impl("submission_workflow")
    titled = await handle_get_prompt("submission_workflow", {"title": "Agents at Scale"})

    assert "for AI-Archive." in untitled[1].content.text
    assert 'titled "Agents at Scale"' in titled.messages[1].content.text


@pytest.mark.asyncio
async def test_unknown_prompt():
    with pytest.raises(ValueError, match="Unknown prompt: nope"):
        await handle_get_prompt("nope", None)
