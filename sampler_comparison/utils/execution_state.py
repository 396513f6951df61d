import time
import datetime

from queue import Queue, Empty


class ExecutionState:
    RUNNING = "RUNNING"
    PAUSED = "PAUSED"
    STOPPED = "STOPPED"

    def __init__(self,
                 interval_provider=None,
                 initial_delay=datetime.timedelta(),
                 state_changes_queue=None,
                 clock=time.monotonic):
        """
        Keeps track of the state of execution for the scheduler and of the time left until the next tick.
        Ticks are scheduled at a fixed rate: the interval is measured from the start of one execution to the start
        of the next one, so the time spent executing the command is subtracted from the wait. If an execution takes
        longer than the interval the next one starts right away.

        The user thread should be the only one changing the state with signal_* calls.
        The sampling thread should only read the state, call mark_tick_started() before executing and
        wait_for_next_tick_or_stop() after executing.
        :param interval_provider: function that provides the interval as timedelta, default returns always 10ms
        :param initial_delay: time we have to wait before the first execution, default is empty timedelta.
        :param state_changes_queue: the queue in which signals for changes are going. used only for unit tests.
        :param clock: a function to return current time in seconds, used only for unit tests. default is
            time.monotonic
        """
        self._state_changes = state_changes_queue or Queue()
        self._current_state = ExecutionState.RUNNING
        self._clock = clock
        self.initial_delay = initial_delay
        self._last_tick_started = None
        self.interval_provider = \
            interval_provider if interval_provider else lambda: datetime.timedelta(milliseconds=10)

    def signal_resume(self, block=False):
        self._signal(ExecutionState.RUNNING, block)

    def signal_pause(self, block=False):
        self._signal(ExecutionState.PAUSED, block)

    def signal_stop(self, block=False):
        self._signal(ExecutionState.STOPPED, block)

    def _signal(self, state, block):
        self._state_changes.put(state)
        if block:
            self._state_changes.join()

    def set_stopped(self):
        """
        Contrary to signal_stop, this should not be used by the user thread.
        This is used by the sampling thread to make sure the state is set to STOPPED
        when it is stopping for other reasons than a user's signal_stop() call.
        """
        self._current_state = ExecutionState.STOPPED

    def is_paused(self):
        return self._current_state is ExecutionState.PAUSED

    def is_stopped(self):
        return self._current_state is ExecutionState.STOPPED

    def mark_tick_started(self):
        self._last_tick_started = self._clock()

    def next_delay_seconds(self):
        """
        returns the delay in seconds that we are going to wait next
        """
        if self.initial_delay is not None:
            return self.initial_delay.total_seconds()
        interval_seconds = self.interval_provider().total_seconds()
        if self._last_tick_started is None:
            return interval_seconds
        return max(0.0, interval_seconds - (self._clock() - self._last_tick_started))

    def _wait_for_execution_time(self):
        """
        Wait for the next execution time or for any change of status.
        A zero delay returns immediately without even checking the queue.

        :return: The new status or None if it is time to execute.
        """
        next_delay_seconds = self.next_delay_seconds()
        if next_delay_seconds == 0:
            return None
        try:
            return self._state_changes.get(block=True, timeout=next_delay_seconds)
        except Empty:
            return None

    def _wait_for_resume(self):
        return self._state_changes.get(block=True)

    def wait_for_next_tick_or_stop(self):
        """
        Wait until it is time to execute or the execution is stopped.
        Status is either RUNNING or STOPPED at the end.
        If initial_delay was set to 0 this returns True even if we have immediately paused or stopped.

        :return: True if the status is RUNNING at the end. False otherwise.
        """
        is_time_to_execute = False
        while self._current_state is not ExecutionState.STOPPED and not is_time_to_execute:
            if self._current_state is ExecutionState.PAUSED:
                new_state = self._wait_for_resume()
            else:
                new_state = self._wait_for_execution_time()
            # no change in the state after waiting means it is time to execute
            is_time_to_execute = new_state is None
            if new_state is not None:
                self._current_state = new_state
                self._state_changes.task_done()

        self.initial_delay = None
        return self._current_state is ExecutionState.RUNNING
