"""
Unit tests for the Discord presenter with mocked Discord objects.
"""
import unittest
import asyncio
import tempfile
import shutil
from unittest.mock import Mock, AsyncMock
import discord

from trivia_board.bot import (
    DEFAULT_BOARD_TITLE,
    TIMER_COLORS,
    TriviaBot,
    build_board_embed,
    timer_status,
)
from trivia_board.config_manager import ConfigManager
from trivia_board.countdown import CountdownDriver
from trivia_board.models import GameState
from trivia_board.question_bank import DEFAULT_QUESTIONS
from trivia_board.question_source import InvalidQuestionError
from tests.test_fixtures import MockDiscordObjects, TestFixtures


def make_state(**overrides) -> GameState:
    values = dict(
        scores=(0, 0, 0, 0),
        current_team=0,
        time_remaining=30,
        timer_active=False,
        active_question=None,
        answer_revealed=False,
    )
    values.update(overrides)
    return GameState(**values)


class TestBoardRendering(unittest.TestCase):
    """Test cases for turning a snapshot into an embed."""

    def setUp(self):
        """Set up test fixtures."""
        self.question = TestFixtures.create_sample_questions()[2]

    def test_timer_status(self):
        """Test clock classification for display."""
        self.assertEqual(timer_status(make_state(), 5), "idle")
        running = make_state(active_question=self.question, timer_active=True, time_remaining=12)
        self.assertEqual(timer_status(running, 5), "normal")
        low = make_state(active_question=self.question, timer_active=True, time_remaining=5)
        self.assertEqual(timer_status(low, 5), "low")
        expired = make_state(active_question=self.question, timer_active=False, time_remaining=0)
        self.assertEqual(timer_status(expired, 5), "expired")

    def test_idle_board(self):
        """Test the idle board invites the current team to start."""
        embed = build_board_embed(make_state(current_team=2, scores=(1, 0, 3, 0)))

        self.assertEqual(embed.title, DEFAULT_BOARD_TITLE)
        self.assertIn("/start_turn", embed.description)
        self.assertIn("Team 3", embed.description)
        self.assertEqual(embed.color.value, TIMER_COLORS["idle"])
        scores = embed.fields[0].value
        self.assertIn("▶ Team 3: 3", scores)
        self.assertIn("Team 1: 1", scores)
        self.assertEqual(len(embed.fields), 2)

    def test_question_board_hides_answer(self):
        """Test the answer is hidden until revealed."""
        state = make_state(active_question=self.question, timer_active=True, time_remaining=20)
        embed = build_board_embed(state, title="Pub Quiz")

        self.assertEqual(embed.title, "Pub Quiz")
        self.assertEqual(embed.description, self.question.text)
        names = [field.name for field in embed.fields]
        self.assertIn("📊 Difficulty", names)
        self.assertNotIn("✅ Answer", names)

    def test_revealed_answer_shown(self):
        """Test a revealed answer is rendered."""
        state = make_state(active_question=self.question, timer_active=True, answer_revealed=True)
        embed = build_board_embed(state)

        self.assertEqual(embed.fields[-1].value, self.question.answer)

    def test_expired_footer(self):
        """Test an expired clock prompts for a judgment."""
        state = make_state(active_question=self.question, time_remaining=0)
        embed = build_board_embed(state)

        self.assertEqual(embed.color.value, TIMER_COLORS["expired"])
        self.assertIn("/correct", embed.footer.text)


class TestTriviaBotHandlers(unittest.IsolatedAsyncioTestCase):
    """Test slash command handlers against a real engine."""

    async def asyncSetUp(self):
        """Async setup for bot testing."""
        self.bot = TriviaBot({'bot': {'title': 'Test Board'}})
        self.bot.config_manager = ConfigManager()
        self.bot.build_game()

        self.gate = asyncio.Event()

        async def blocking_sleep(_):
            await self.gate.wait()

        self.bot.countdown = CountdownDriver(
            self.bot.engine, on_tick=self.bot.refresh_board, sleep=blocking_sleep
        )
        self.interaction = MockDiscordObjects.create_mock_interaction()

    async def asyncTearDown(self):
        """Clean up after tests."""
        self.bot.countdown.stop()
        await self.bot.countdown.wait()

    async def test_board_title_from_config(self):
        """Test the board title is read from the bot config."""
        self.assertEqual(self.bot.board_title, 'Test Board')
        self.assertEqual(self.bot.render_board().title, 'Test Board')

    async def test_start_turn(self):
        """Test /start_turn posts the board and starts the countdown."""
        await self.bot.handle_start_turn(self.interaction)
        await asyncio.sleep(0)

        self.assertIn(self.bot.engine.active_question, DEFAULT_QUESTIONS)
        self.assertTrue(self.bot.engine.timer_active)
        self.assertTrue(self.bot.countdown.is_running)
        self.interaction.response.send_message.assert_awaited_once()
        embed = self.interaction.response.send_message.await_args.kwargs['embed']
        self.assertEqual(embed.description, self.bot.engine.active_question.text)
        self.assertIsNotNone(self.bot.board_message)
        self.interaction.channel.send.assert_awaited_with("🔔 Team 1, your time starts now!")

    async def test_start_turn_while_running_warns(self):
        """Test a second /start_turn is rejected with an ephemeral warning."""
        await self.bot.handle_start_turn(self.interaction)
        question = self.bot.engine.active_question

        second = MockDiscordObjects.create_mock_interaction()
        await self.bot.handle_start_turn(second)

        self.assertEqual(self.bot.engine.active_question, question)
        kwargs = second.response.send_message.await_args.kwargs
        self.assertTrue(kwargs['ephemeral'])
        self.assertEqual(kwargs['embed'].title, "⚠️ Turn In Progress")

    async def test_reveal_without_question(self):
        """Test /reveal with an empty board warns the user."""
        await self.bot.handle_reveal(self.interaction)

        kwargs = self.interaction.response.send_message.await_args.kwargs
        self.assertTrue(kwargs['ephemeral'])
        self.assertFalse(self.bot.engine.answer_revealed)

    async def test_reveal_updates_board(self):
        """Test /reveal shows the answer and refreshes the board message."""
        await self.bot.handle_start_turn(self.interaction)
        reveal = MockDiscordObjects.create_mock_interaction()

        await self.bot.handle_reveal(reveal)

        self.assertTrue(self.bot.engine.answer_revealed)
        embed = reveal.response.send_message.await_args.kwargs['embed']
        self.assertEqual(embed.fields[-1].value, self.bot.engine.active_question.answer)
        self.bot.board_message.edit.assert_awaited()

    async def test_correct_judgment(self):
        """Test /correct scores, stops the countdown and cues the judged team."""
        await self.bot.handle_start_turn(self.interaction)
        judge = MockDiscordObjects.create_mock_interaction()

        await self.bot.handle_judge(judge, True)
        await asyncio.sleep(0)

        self.assertEqual(self.bot.engine.scores, (1, 0, 0, 0))
        self.assertEqual(self.bot.engine.current_team, 1)
        self.assertFalse(self.bot.countdown.is_running)
        self.interaction.channel.send.assert_awaited_with("🎉 Correct! Point to Team 1.")

    async def test_incorrect_judgment(self):
        """Test /incorrect passes play without a point."""
        await self.bot.handle_start_turn(self.interaction)

        await self.bot.handle_judge(MockDiscordObjects.create_mock_interaction(), False)
        await asyncio.sleep(0)

        self.assertEqual(self.bot.engine.scores, (0, 0, 0, 0))
        self.assertEqual(self.bot.engine.current_team, 1)
        self.interaction.channel.send.assert_awaited_with("❌ Not quite, Team 1.")

    async def test_judge_without_question(self):
        """Test judging an empty board warns and changes nothing."""
        await self.bot.handle_judge(self.interaction, True)

        self.assertEqual(self.bot.engine.scores, (0, 0, 0, 0))
        self.assertEqual(self.bot.engine.current_team, 0)
        self.assertTrue(self.interaction.response.send_message.await_args.kwargs['ephemeral'])

    async def test_scores_footer_names_leaders(self):
        """Test /scores lists every team and the leaders."""
        await self.bot.handle_start_turn(self.interaction)
        await self.bot.handle_judge(MockDiscordObjects.create_mock_interaction(), True)
        scores = MockDiscordObjects.create_mock_interaction()

        await self.bot.handle_scores(scores)

        embed = scores.response.send_message.await_args.kwargs['embed']
        self.assertEqual([field.value for field in embed.fields], ["1", "0", "0", "0"])
        self.assertEqual(embed.footer.text, "Leading: Team 1")

    async def test_new_game(self):
        """Test /new_game clears scores, stops the countdown and posts a cue."""
        await self.bot.handle_start_turn(self.interaction)
        await self.bot.handle_judge(MockDiscordObjects.create_mock_interaction(), True)
        last_start = MockDiscordObjects.create_mock_interaction()
        await self.bot.handle_start_turn(last_start)

        await self.bot.handle_new_game(MockDiscordObjects.create_mock_interaction())

        state = self.bot.engine.snapshot()
        self.assertEqual(state.scores, (0, 0, 0, 0))
        self.assertIsNone(state.active_question)
        self.assertIsNone(self.bot.board_message)
        await asyncio.sleep(0)
        self.assertFalse(self.bot.countdown.is_running)
        last_start.channel.send.assert_any_await("🔄 New game! Team 1 is up.")

    async def test_refresh_board_survives_http_errors(self):
        """Test a failed board edit is logged, not raised."""
        message = MockDiscordObjects.create_mock_message()
        message.edit.side_effect = discord.HTTPException(Mock(), "edit failed")
        self.bot.board_message = message

        with self.assertLogs('trivia_board.bot', level='ERROR'):
            await self.bot.refresh_board()

    async def test_cue_failure_is_contained(self):
        """Test a failed cue message never reaches the engine."""
        self.interaction.channel.send.side_effect = discord.HTTPException(Mock(), "send failed")

        with self.assertLogs('trivia_board.bot', level='WARNING'):
            await self.bot.handle_start_turn(self.interaction)
            await asyncio.sleep(0)

        self.assertTrue(self.bot.engine.timer_active)

    async def test_help_lists_commands(self):
        """Test /help shows turn commands and current settings."""
        await self.bot.handle_help(self.interaction)

        embed = self.interaction.response.send_message.await_args.kwargs['embed']
        self.assertIn("/start_turn", embed.fields[0].value)
        self.assertIn("Teams: 4", embed.fields[2].value)


class TestTriviaBotSetup(unittest.IsolatedAsyncioTestCase):
    """Test bot setup from configuration."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        """Clean up test fixtures."""
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    async def test_setup_registers_commands(self):
        """Test setup builds the game from config and registers slash commands."""
        bot = TriviaBot({'game': {'team_count': 3, 'turn_duration': 20}})

        await bot.setup_hook()

        self.assertEqual(len(bot.engine.scores), 3)
        self.assertEqual(bot.engine.time_remaining, 20)
        names = {command.name for command in bot.tree.get_commands()}
        self.assertEqual(
            names,
            {"help", "start_turn", "reveal", "correct", "incorrect", "scores", "new_game"}
        )

    async def test_setup_uses_question_file(self):
        """Test the configured question file supplies the pool."""
        path = TestFixtures.write_json(
            self.temp_dir, "pool.json", TestFixtures.create_valid_pool_json()
        )
        bot = TriviaBot({'game': {'question_file': str(path)}})

        await bot.setup_hook()
        bot.engine.start_turn()

        self.assertIn(
            bot.engine.active_question.answer,
            {"Tokyo", "15", "Gabriel García Márquez"}
        )

    async def test_setup_aborts_on_invalid_question_file(self):
        """Test a malformed question file stops startup."""
        path = TestFixtures.write_json(self.temp_dir, "pool.json", {"questions": [{"answer": "x"}]})
        bot = TriviaBot({'game': {'question_file': str(path)}})

        with self.assertRaises(InvalidQuestionError):
            await bot.setup_hook()


if __name__ == '__main__':
    unittest.main()
