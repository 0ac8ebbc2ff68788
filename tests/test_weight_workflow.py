"""Weight update workflow against the in-memory backend"""
from datetime import timedelta

import pytest

from services.achievements import AchievementKey, key_from_row
from services.errors import InvalidWeight, ParticipantNotFound, PersistenceFailure
from services.weight_workflow import WorkflowState


def keys(rows):
    return [key_from_row(row) for row in rows]


class TestWeightUpdate:
    @pytest.mark.asyncio
    async def test_happy_path_walks_every_state(self, register, workflow, today):
        user = await register(start_weight=90, target_weight=80)

        result = await workflow.update_weight(user['id'], 88, today)

        assert result.states == [
            WorkflowState.VALIDATING,
            WorkflowState.PERSISTING_WEIGHT,
            WorkflowState.PERSISTING_HISTORY,
            WorkflowState.REFETCHING,
            WorkflowState.CLASSIFYING,
            WorkflowState.DONE,
        ]
        assert float(result.user['current_weight']) == 88
        assert result.previous_weight == 90
        assert result.weight_change == -2
        assert not result.weight_gained

    @pytest.mark.asyncio
    async def test_points_come_from_the_backend_trigger(self, register, workflow, fake_client, today):
        user = await register(start_weight=90, target_weight=80)
        fake_client.points_formula = lambda start, current: 4242

        result = await workflow.update_weight(user['id'], 89, today)

        assert result.user['points'] == 4242

    @pytest.mark.asyncio
    async def test_kg_ladder_scenario(self, register, workflow, today):
        user = await register(start_weight=90, target_weight=70)

        first = await workflow.update_weight(user['id'], 88, today)
        assert keys(first.new_achievements) == [AchievementKey.kg_lost(1), AchievementKey.kg_lost(2)]
        assert first.user['points'] == 200

        second = await workflow.update_weight(user['id'], 80, today + timedelta(days=1))
        new_kg = [k for k in keys(second.new_achievements) if k.type.value == 'kg-lost']
        assert new_kg == [AchievementKey.kg_lost(k) for k in range(3, 11)]
        assert AchievementKey.percent_complete(50) in keys(second.new_achievements)

        # Full list holds old and new, newest first
        assert len(second.achievements) == len(first.new_achievements) + len(second.new_achievements)
        assert keys(second.achievements)[:len(second.new_achievements)] == keys(second.new_achievements)

    @pytest.mark.asyncio
    async def test_goal_is_awarded_once(self, register, workflow, fake_client, today):
        user = await register(start_weight=80, target_weight=75)

        first = await workflow.update_weight(user['id'], 75, today)
        again = await workflow.update_weight(user['id'], 75, today)
        later = await workflow.update_weight(user['id'], 75, today + timedelta(days=1))

        assert AchievementKey.goal_achieved() in keys(first.new_achievements)
        assert again.new_achievements == []
        assert later.new_achievements == []
        goals = [a for a in fake_client.rows('achievements') if a['achievement_type'] == 'goal-achieved']
        assert len(goals) == 1

    @pytest.mark.asyncio
    async def test_same_day_update_overwrites_entry(self, register, workflow, fake_client, today):
        user = await register(start_weight=90, target_weight=80)

        await workflow.update_weight(user['id'], 89, today)
        result = await workflow.update_weight(user['id'], 88.5, today)

        entries = [e for e in fake_client.rows('weight_history') if e['user_id'] == user['id']]
        # the seed entry shares the join day
        assert len(entries) == 1
        assert entries[0]['weight'] == 88.5
        assert result.weight_entry['id'] == entries[0]['id']

    @pytest.mark.asyncio
    async def test_new_day_appends_entry(self, register, workflow, fake_client, today):
        user = await register(start_weight=90, target_weight=80)

        await workflow.update_weight(user['id'], 89, today + timedelta(days=1))
        await workflow.update_weight(user['id'], 88, today + timedelta(days=2))

        dates = sorted(e['recorded_date'] for e in fake_client.rows('weight_history'))
        assert dates == [str(today), str(today + timedelta(days=1)), str(today + timedelta(days=2))]

    @pytest.mark.asyncio
    async def test_weight_gain_updates_state_without_achievements(self, register, workflow, fake_client, today):
        user = await register(start_weight=90, target_weight=80)
        await workflow.update_weight(user['id'], 87, today)
        before = len(fake_client.rows('achievements'))

        result = await workflow.update_weight(user['id'], 92, today + timedelta(days=1))

        assert result.weight_gained
        assert result.weight_change == 5
        assert result.new_achievements == []
        assert result.user['points'] == 0
        assert len(result.achievements) == before
        assert len(fake_client.rows('achievements')) == before
        assert WorkflowState.DONE in result.states


class TestWeightUpdateFailures:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("weight", [29.9, 300.5, float('nan')])
    async def test_invalid_weight_touches_nothing(self, register, workflow, fake_client, today, weight):
        user = await register()
        calls_before = len(fake_client.calls)

        with pytest.raises(InvalidWeight):
            await workflow.update_weight(user['id'], weight, today)

        assert len(fake_client.calls) == calls_before

    @pytest.mark.asyncio
    async def test_unknown_participant(self, workflow, today):
        with pytest.raises(ParticipantNotFound):
            await workflow.update_weight('missing', 80, today)

    @pytest.mark.asyncio
    async def test_weight_write_failure_leaves_no_history(self, register, workflow, fake_client, today):
        user = await register(start_weight=90, target_weight=80)
        fake_client.fail('users', 'update')

        with pytest.raises(PersistenceFailure):
            await workflow.update_weight(user['id'], 85, today + timedelta(days=1))

        assert len(fake_client.rows('weight_history')) == 1
        assert fake_client.rows('users')[0]['current_weight'] == 90

    @pytest.mark.asyncio
    async def test_history_failure_restores_current_weight(self, register, workflow, fake_client, today):
        user = await register(start_weight=90, target_weight=80)
        fake_client.fail('weight_history', 'insert')

        with pytest.raises(PersistenceFailure):
            await workflow.update_weight(user['id'], 85, today + timedelta(days=1))

        stored = fake_client.rows('users')[0]
        assert stored['current_weight'] == 90
        assert fake_client.rows('achievements') == []

    @pytest.mark.asyncio
    async def test_refetch_failure_is_reported(self, register, workflow, fake_client, today):
        user = await register()

        original_get = workflow.supabase_service.get_user_by_id
        calls = {'n': 0}

        async def flaky_get(user_id):
            calls['n'] += 1
            if calls['n'] > 1:
                raise PersistenceFailure("Failed to fetch updated user data")
            return await original_get(user_id)

        workflow.supabase_service.get_user_by_id = flaky_get

        with pytest.raises(PersistenceFailure, match="updated user data"):
            await workflow.update_weight(user['id'], 85, today)

    @pytest.mark.asyncio
    async def test_no_automatic_retry(self, register, workflow, fake_client, today):
        user = await register()
        fake_client.fail('weight_history', 'update')

        with pytest.raises(PersistenceFailure):
            await workflow.update_weight(user['id'], 85, today)

        assert fake_client.calls.count(('weight_history', 'update')) == 1

    @pytest.mark.asyncio
    async def test_achievement_failure_stores_no_partial_badges(self, register, workflow, fake_client, today):
        user = await register(start_weight=90, target_weight=80)
        fake_client.fail('achievements', 'insert')

        with pytest.raises(PersistenceFailure, match="achievements"):
            await workflow.update_weight(user['id'], 87, today)

        assert fake_client.rows('achievements') == []
        assert fake_client.calls.count(('achievements', 'insert')) == 1

        # Every badge from the failed update is announced on the next one
        fake_client.recover()
        result = await workflow.update_weight(user['id'], 87, today)
        assert keys(result.new_achievements) == [
            AchievementKey.kg_lost(1), AchievementKey.kg_lost(2), AchievementKey.kg_lost(3),
            AchievementKey.percent_complete(25),
        ]

    @pytest.mark.asyncio
    async def test_history_read_failure_fails_before_classifying(self, register, workflow, fake_client, today):
        user = await register(start_weight=90, target_weight=80)

        async def broken_history(user_id):
            raise PersistenceFailure("Failed to fetch weight history")

        workflow.supabase_service.get_weight_history = broken_history

        with pytest.raises(PersistenceFailure, match="weight history"):
            await workflow.update_weight(user['id'], 85, today)

        assert fake_client.rows('achievements') == []


class TestWeightHistoryOnResult:
    @pytest.mark.asyncio
    async def test_result_carries_refreshed_history(self, register, workflow, today):
        user = await register(start_weight=90, target_weight=80)
        await workflow.update_weight(user['id'], 88, today + timedelta(days=1))

        result = await workflow.update_weight(user['id'], 87, today + timedelta(days=2))

        assert [float(row['weight']) for row in result.weight_history] == [87, 88, 90]
        assert result.weight_history[0]['id'] == result.weight_entry['id']


class TestAchievementStorage:
    @pytest.mark.asyncio
    async def test_duplicate_achievement_is_rejected(self, register, supabase):
        user = await register()
        row = {'user_id': user['id'], 'achievement_type': 'goal-achieved', 'achievement_value': None}
        await supabase.create_achievements([row])

        with pytest.raises(PersistenceFailure):
            await supabase.create_achievements([dict(row)])

        assert len(await supabase.get_achievements(user['id'])) == 1

    @pytest.mark.asyncio
    async def test_duplicate_within_one_insert_stores_nothing(self, register, supabase):
        user = await register()
        row = {'user_id': user['id'], 'achievement_type': 'kg-lost', 'achievement_value': '1'}

        with pytest.raises(PersistenceFailure):
            await supabase.create_achievements([row, dict(row)])

        assert await supabase.get_achievements(user['id']) == []
