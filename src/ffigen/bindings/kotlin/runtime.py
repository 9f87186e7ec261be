# Copyright 2026 ffigen Contributors
# SPDX-License-Identifier: Apache-2.0

"""The fixed runtime fragment at the top of every generated Kotlin file.

It declares the JNA structures of the buffer protocol, the call helpers that
check the call status, the ``FFIObject`` base class, the callback handle map
and the ``_UniFFILib`` library interface listing every native symbol.
"""

from __future__ import annotations

from ffigen.bindings.backend import LanguageOracle
from ffigen.bindings.kotlin.callback_interface import CallbackInterfaceCodeType
from ffigen.bindings.templating import block, indent, render
from ffigen.model.entities import ComponentInterface
from ffigen.model.ffi import (
    FFIFunction,
    buffer_alloc_symbol,
    buffer_free_symbol,
    buffer_reserve_symbol,
    ffi_functions,
)

# ###############
# Public Interface
# ###############

RUNTIME_IMPORTS = [
    "com.sun.jna.Library",
    "com.sun.jna.Native",
    "com.sun.jna.Pointer",
    "com.sun.jna.Structure",
    "java.nio.ByteBuffer",
    "java.nio.ByteOrder",
    "java.util.concurrent.atomic.AtomicBoolean",
    "java.util.concurrent.atomic.AtomicLong",
    "java.util.concurrent.locks.ReentrantLock",
    "kotlin.concurrent.withLock",
]

#: Classes and interfaces the runtime fragment declares or imports, plus the Kotlin types
#: the generated code names unqualified.
RUNTIME_CLASS_NAMES = frozenset(
    {
        "CallScope",
        "CallStatusErrorHandler",
        "ConcurrentHandleMap",
        "Disposable",
        "FFIObject",
        "FfiConverterCallbackInterface",
        "ForeignBytes",
        "ForeignCallback",
        "InternalException",
        "NativeBuffer",
        "NativeBufferBuilder",
        "NativeCallStatus",
        "NullCallStatusErrorHandler",
        "_UniFFILib",
        "AtomicBoolean",
        "AtomicLong",
        "ByteBuffer",
        "ByteOrder",
        "Library",
        "Native",
        "Pointer",
        "ReentrantLock",
        "Structure",
        "Any",
        "Boolean",
        "Byte",
        "Double",
        "Duration",
        "Exception",
        "Float",
        "Instant",
        "Int",
        "List",
        "Long",
        "Map",
        "Short",
        "String",
        "UByte",
        "UInt",
        "ULong",
        "UShort",
        "Unit",
    }
)


def runtime_code(oracle: LanguageOracle, ci: ComponentInterface, cdylib_name: str) -> str:
    """Render the runtime fragment for *ci*, loading the native library *cdylib_name*."""
    registrations = [
        f"{CallbackInterfaceCodeType(cbi).internals(oracle)}.register(lib)" for cbi in ci.callback_interfaces
    ]
    declarations = [_declaration(oracle, f) for f in ffi_functions(ci)]
    return render(
        _RUNTIME_TEMPLATE,
        buffer_alloc=buffer_alloc_symbol(ci.namespace),
        buffer_free=buffer_free_symbol(ci.namespace),
        buffer_reserve=buffer_reserve_symbol(ci.namespace),
        cdylib=cdylib_name,
        registrations=indent(block(registrations, "// No callback interfaces"), 4),
        ffi_declarations=indent("\n\n".join(declarations), 1),
    )


# ################
# Implementation
# ################


def _declaration(oracle: LanguageOracle, func: FFIFunction) -> str:
    params = [f"{oracle.var_name(a.name)}: {oracle.ffi_type_label(a.type)}" for a in func.arguments]
    if func.has_call_status:
        params.append("_uniffi_out_err: NativeCallStatus")
    ret = f": {oracle.ffi_type_label(func.return_type)}" if func.return_type is not None else ""
    return f"fun {func.name}({', '.join(params)}){ret}"


_RUNTIME_TEMPLATE = """\
@Structure.FieldOrder("capacity", "len", "data")
open class NativeBuffer : Structure() {
    @JvmField var capacity: Int = 0
    @JvmField var len: Int = 0
    @JvmField var data: Pointer? = null

    class ByValue : NativeBuffer(), Structure.ByValue
    class ByReference : NativeBuffer(), Structure.ByReference

    companion object {
        internal fun alloc(size: Int = 0) = nativeCall() { status ->
            _UniFFILib.INSTANCE.${buffer_alloc}(size, status)
        }

        internal fun free(buf: NativeBuffer.ByValue) = nativeCall() { status ->
            _UniFFILib.INSTANCE.${buffer_free}(buf, status)
        }

        internal fun reserve(buf: NativeBuffer.ByValue, additional: Int) = nativeCall() { status ->
            _UniFFILib.INSTANCE.${buffer_reserve}(buf, additional, status)
        }
    }

    fun asByteBuffer(): ByteBuffer? {
        return this.data?.getByteBuffer(0, this.len.toLong())?.also {
            it.order(ByteOrder.BIG_ENDIAN)
        }
    }
}

// Copies the fields of a returned buffer into an out parameter.
internal fun NativeBuffer.ByReference.setValue(other: NativeBuffer.ByValue) {
    this.capacity = other.capacity
    this.len = other.len
    this.data = other.data
    this.write()
}

@Structure.FieldOrder("len", "data")
open class ForeignBytes : Structure() {
    @JvmField var len: Int = 0
    @JvmField var data: Pointer? = null

    class ByValue : ForeignBytes(), Structure.ByValue
}

// Appends big-endian values to a native buffer, growing it as needed.
class NativeBufferBuilder {
    var rbuf = NativeBuffer.ByValue()
    var bbuf: ByteBuffer? = null

    init {
        val rbuf = NativeBuffer.alloc(16)
        rbuf.writeField("len", 0)
        this.setNativeBuffer(rbuf)
    }

    internal fun setNativeBuffer(rbuf: NativeBuffer.ByValue) {
        this.rbuf = rbuf
        this.bbuf = this.rbuf.data?.getByteBuffer(0, this.rbuf.capacity.toLong())?.also {
            it.order(ByteOrder.BIG_ENDIAN)
            it.position(rbuf.len)
        }
    }

    fun finalize(): NativeBuffer.ByValue {
        val rbuf = this.rbuf
        rbuf.writeField("len", this.bbuf!!.position())
        this.setNativeBuffer(NativeBuffer.ByValue())
        return rbuf
    }

    fun discard() {
        if (this.rbuf.data != null) {
            val rbuf = this.finalize()
            NativeBuffer.free(rbuf)
        }
    }

    internal fun reserve(size: Int, write: (ByteBuffer) -> Unit) {
        if (this.bbuf!!.position() + size > this.rbuf.capacity) {
            rbuf.writeField("len", this.bbuf!!.position())
            this.setNativeBuffer(NativeBuffer.reserve(this.rbuf, size))
        }
        write(this.bbuf!!)
    }

    fun putByte(v: Byte) {
        this.reserve(1) { bbuf -> bbuf.put(v) }
    }

    fun putShort(v: Short) {
        this.reserve(2) { bbuf -> bbuf.putShort(v) }
    }

    fun putInt(v: Int) {
        this.reserve(4) { bbuf -> bbuf.putInt(v) }
    }

    fun putLong(v: Long) {
        this.reserve(8) { bbuf -> bbuf.putLong(v) }
    }

    fun putFloat(v: Float) {
        this.reserve(4) { bbuf -> bbuf.putFloat(v) }
    }

    fun putDouble(v: Double) {
        this.reserve(8) { bbuf -> bbuf.putDouble(v) }
    }

    fun put(v: ByteArray) {
        this.reserve(v.size) { bbuf -> bbuf.put(v) }
    }
}

// Reads a value out of a returned buffer, then frees it. Trailing bytes are an error.
internal fun<T> liftFromNativeBuffer(rbuf: NativeBuffer.ByValue, readItem: (ByteBuffer) -> T): T {
    val buf = rbuf.asByteBuffer()!!
    try {
        val item = readItem(buf)
        if (buf.hasRemaining()) {
            throw InternalException("Junk remaining in buffer after lifting, something is very wrong!!")
        }
        return item
    } finally {
        NativeBuffer.free(rbuf)
    }
}

// Serializes a value into a fresh buffer. The buffer is discarded if writing fails.
internal fun<T> lowerIntoNativeBuffer(v: T, writeItem: (T, NativeBufferBuilder) -> Unit): NativeBuffer.ByValue {
    val buf = NativeBufferBuilder()
    try {
        writeItem(v, buf)
        return buf.finalize()
    } catch (e: Throwable) {
        buf.discard()
        throw e
    }
}

internal fun readNativeString(buf: ByteBuffer): String {
    val len = buf.getInt()
    if (len < 0) {
        throw InternalException("Unexpected negative string length")
    }
    val byteArr = ByteArray(len)
    buf.get(byteArr)
    return byteArr.toString(Charsets.UTF_8)
}

internal fun writeNativeString(v: String, buf: NativeBufferBuilder) {
    val byteArr = v.toByteArray(Charsets.UTF_8)
    buf.putInt(byteArr.size)
    buf.put(byteArr)
}

internal fun lowerNativeString(v: String): NativeBuffer.ByValue {
    return lowerIntoNativeBuffer(v) { v, buf -> writeNativeString(v, buf) }
}

@Structure.FieldOrder("code", "error_buf")
internal open class NativeCallStatus : Structure() {
    @JvmField var code: Byte = 0
    @JvmField var error_buf: NativeBuffer.ByValue = NativeBuffer.ByValue()

    fun isSuccess(): Boolean {
        return code == 0.toByte()
    }

    fun isError(): Boolean {
        return code == 1.toByte()
    }

    fun isPanic(): Boolean {
        return code == 2.toByte()
    }
}

class InternalException(message: String) : Exception(message)

// Lifts the declared error of a call out of its failed call status.
interface CallStatusErrorHandler<E> {
    fun lift(error_buf: NativeBuffer.ByValue): E
}

object NullCallStatusErrorHandler : CallStatusErrorHandler<InternalException> {
    override fun lift(error_buf: NativeBuffer.ByValue): InternalException {
        NativeBuffer.free(error_buf)
        return InternalException("Unexpected CALL_ERROR")
    }
}

private inline fun <U, E : Exception> nativeCallWithError(
    errorHandler: CallStatusErrorHandler<E>,
    callback: (NativeCallStatus) -> U,
): U {
    var status = NativeCallStatus()
    val return_value = callback(status)
    if (status.isSuccess()) {
        return return_value
    } else if (status.isError()) {
        throw errorHandler.lift(status.error_buf)
    } else if (status.isPanic()) {
        // A panic may carry a message; without one the error buffer is empty
        if (status.error_buf.len > 0) {
            throw InternalException(liftFromNativeBuffer(status.error_buf) { buf -> readNativeString(buf) })
        } else {
            throw InternalException("Native panic")
        }
    } else {
        throw InternalException("Unknown native call status: " + status.code)
    }
}

private inline fun <U> nativeCall(callback: (NativeCallStatus) -> U): U {
    return nativeCallWithError(NullCallStatusErrorHandler, callback)
}

// Implemented by generated types that own native objects, directly or nested.
interface Disposable {
    fun destroy()

    companion object {
        fun destroy(vararg args: Any?) {
            args.filterIsInstance<Disposable>().forEach(Disposable::destroy)
            args.filterIsInstance<Iterable<*>>().forEach { Disposable.destroy(*it.toList().toTypedArray()) }
            args.filterIsInstance<Map<*, *>>().forEach { Disposable.destroy(*it.values.toTypedArray()) }
        }
    }
}

inline fun <T : Disposable?, R> T.use(block: (T) -> R) =
    try {
        block(this)
    } finally {
        try {
            this?.destroy()
        } catch (e: Throwable) {
            // Errors while destroying are not allowed to mask the original one
        }
    }

// Owns one native handle. The handle is freed exactly once, after destroy()
// has been called and every call that started before it has returned.
abstract class FFIObject(
    protected val pointer: Pointer
) : Disposable, AutoCloseable {

    private val wasDestroyed = AtomicBoolean(false)
    private val callCounter = AtomicLong(1)

    protected abstract fun freeNativeHandle()

    override fun destroy() {
        if (!this.wasDestroyed.compareAndSet(false, true)) {
            throw IllegalStateException(this.javaClass.simpleName + " object has already been destroyed")
        }
        if (this.callCounter.decrementAndGet() == 0L) {
            this.freeNativeHandle()
        }
    }

    @Synchronized
    override fun close() {
        this.destroy()
    }

    internal fun borrowPointer(): Pointer {
        do {
            val c = this.callCounter.get()
            if (c == 0L || this.wasDestroyed.get()) {
                throw IllegalStateException(this.javaClass.simpleName + " object has already been destroyed")
            }
            if (c == Long.MAX_VALUE) {
                throw IllegalStateException(this.javaClass.simpleName + " call counter would overflow")
            }
        } while (!this.callCounter.compareAndSet(c, c + 1L))
        return this.pointer
    }

    internal fun releasePointer() {
        if (this.callCounter.decrementAndGet() == 0L) {
            this.freeNativeHandle()
        }
    }

    internal inline fun <R> callWithPointer(block: (ptr: Pointer) -> R): R {
        val ptr = this.borrowPointer()
        try {
            return block(ptr)
        } finally {
            this.releasePointer()
        }
    }
}

// Owns what the arguments of one native call hold until the call returns.
// Buffers lowered for the call are freed if the call never happens. Objects
// lowered for it, also those nested inside other values, stay borrowed until
// it has returned.
internal class CallScope {
    private val buffers = mutableListOf<NativeBuffer.ByValue>()
    private val borrowed = mutableListOf<FFIObject>()
    private var called = false
    internal var parent: CallScope? = null

    fun <T> track(value: T): T {
        if (value is NativeBuffer.ByValue) {
            this.buffers.add(value)
        }
        return value
    }

    fun borrow(obj: FFIObject): Pointer {
        val ptr = obj.borrowPointer()
        this.borrowed.add(obj)
        return ptr
    }

    // Passed as the last argument, so it runs once every argument is lowered.
    fun called(status: NativeCallStatus): NativeCallStatus {
        this.called = true
        return status
    }

    fun close() {
        if (!this.called) {
            this.buffers.forEach { NativeBuffer.free(it) }
        }
        this.buffers.clear()
        this.borrowed.asReversed().forEach { it.releasePointer() }
        this.borrowed.clear()
    }

    companion object {
        internal val active = ThreadLocal<CallScope?>()
    }
}

internal inline fun <R> withCallScope(block: (CallScope) -> R): R {
    val scope = CallScope()
    scope.parent = CallScope.active.get()
    CallScope.active.set(scope)
    try {
        return block(scope)
    } finally {
        CallScope.active.set(scope.parent)
        scope.close()
    }
}

internal const val IDX_CALLBACK_FREE = 0
internal const val CALLBACK_SUCCESS = 0
internal const val CALLBACK_ERROR = 1
internal const val CALLBACK_UNEXPECTED_ERROR = 2

internal interface ForeignCallback : com.sun.jna.Callback {
    public fun invoke(handle: Long, method: Int, args: NativeBuffer.ByValue, outBuf: NativeBuffer.ByReference): Int
}

// Maps the handles given to native code onto the foreign objects they stand for.
internal class ConcurrentHandleMap<T>(
    private val leftMap: MutableMap<Long, T> = mutableMapOf(),
) {
    private val lock = ReentrantLock()
    private val currentHandle = AtomicLong(0L)
    private val stride = 1L

    fun insert(obj: T): Long =
        lock.withLock {
            currentHandle.getAndAdd(stride)
                .also { handle ->
                    leftMap[handle + stride] = obj
                } + stride
        }

    fun get(handle: Long) = lock.withLock {
        leftMap[handle]
    }

    fun remove(handle: Long): T? =
        lock.withLock {
            leftMap.remove(handle)
        }

    val size: Int
        get() = lock.withLock { leftMap.size }
}

internal abstract class FfiConverterCallbackInterface<CallbackInterface>(
    protected val foreignCallback: ForeignCallback
) {
    private val handleMap = ConcurrentHandleMap<CallbackInterface>()

    internal abstract fun register(lib: _UniFFILib)

    fun drop(handle: Long): NativeBuffer.ByValue {
        handleMap.remove(handle)
        return NativeBuffer.ByValue()
    }

    fun lift(value: Long): CallbackInterface {
        return handleMap.get(value) ?: throw InternalException("No callback in handlemap; this is a bug")
    }

    fun read(buf: ByteBuffer) = lift(buf.getLong())

    fun lower(value: CallbackInterface) = handleMap.insert(value)

    fun write(value: CallbackInterface, buf: NativeBufferBuilder) {
        buf.putLong(lower(value))
    }
}

internal interface _UniFFILib : Library {
    companion object {
        internal val INSTANCE: _UniFFILib by lazy {
            Native.load("${cdylib}", _UniFFILib::class.java)
                .also { lib: _UniFFILib ->
${registrations}
                }
        }
    }

${ffi_declarations}
}"""
