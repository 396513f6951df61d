import threading
import logging
import datetime

from sampler_comparison.utils.execution_state import ExecutionState

logger = logging.getLogger(__name__)

DEFAULT_TIME_TO_AWAIT_TERMINATION_SECONDS = 2


class Scheduler:
    def __init__(self,
                 command,
                 interval_provider=None,
                 initial_delay=datetime.timedelta(),
                 thread_name=None,
                 clock=None):
        """
        Runs a periodic action on a new daemon thread at a fixed rate: first without delay (unless initial_delay is
        set) and subsequently every interval, measured from the start of one execution to the start of the next.
        The thread terminates when the command returns a falsy value or raises; subsequent executions do not happen.
        The scheduler can be paused, it then keeps its thread alive but does not execute the command until resume()
        is called.

        :param command: the function to execute on every tick, it must return True to keep being scheduled
        :param interval_provider: function providing the interval between executions as a timedelta
        :param initial_delay: delay before first execution as a timedelta, default is 0s.
        :param thread_name: name of the new spawned thread
        :param clock: (for testing) monotonic clock in seconds used to compute the remaining wait
        """
        self._command = command
        self._thread = \
            threading.Thread(target=self._schedule_task_execution, name=thread_name)
        self._thread.daemon = True
        state_arguments = {"interval_provider": interval_provider, "initial_delay": initial_delay}
        if clock is not None:
            state_arguments["clock"] = clock
        self._state = ExecutionState(**state_arguments)

    def start(self):
        if self.is_running():
            logger.info("Ignored Scheduler.start() as it is already running!")
            return
        try:
            self._thread.start()
        except RuntimeError:
            # replace the exception from threading by ours with more explanations.
            raise RuntimeError(
                "Sampling cannot be started again after stop. Use a new SamplingAgent instance or use pause()"
                " instead of stop()")

    def is_running(self):
        """
        This tells if the scheduler thread is alive, it still returns True when we are paused.
        """
        return self._thread.is_alive()

    def is_paused(self):
        return self.is_running() and self._state.is_paused()

    def stop(self):
        """
        Stop the scheduled thread from executing the command and wait for termination.
        """
        self._state.signal_stop()
        if not self.is_running():
            return
        self._thread.join(DEFAULT_TIME_TO_AWAIT_TERMINATION_SECONDS)

    def _schedule_task_execution(self):
        try:
            should_run = self._state.wait_for_next_tick_or_stop()
            while should_run:
                self._state.mark_tick_started()
                should_run = self._command() and self._state.wait_for_next_tick_or_stop()
        finally:
            # the command may have returned False or raised
            self._state.set_stopped()

    def resume(self, block=False):
        """
        :param block: if True, we will not return from this function before the change is applied, default is False.
        """
        self._state.signal_resume(block)

    def pause(self, block=False):
        """
        :param block: if True, we will not return from this function before the change is applied, default is False.
        """
        self._state.signal_pause(block)

    def _get_next_delay_seconds(self):
        """
        Useful for testing
        """
        return self._state.next_delay_seconds()
